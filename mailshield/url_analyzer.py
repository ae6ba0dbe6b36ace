# mailshield/url_analyzer.py
import logging
from typing import List, Optional, Sequence

import httpx

from .config import Settings
from .external import error_detail
from .schemas import ThreatLookupResult, ThreatMatch

logger = logging.getLogger(__name__)

# Слова-приманки, которые часто встречаются в фишинговых ссылках
SUSPICIOUS_TOKENS = [
    "verify", "login", "confirm", "secure", "account",
    "update", "reset", "bank", "paypal", "signin",
    "claim", "won", "congrats",
]

# TLD, которые часто связаны со злоупотреблениями
ODD_TLDS = [".ru", ".cn", ".tk", ".ml", ".ga", ".cf", ".gq"]

PUNYCODE_MARKER = "xn--"
PUNYCODE_REASON = "punycode / idn suspicious"

SAFE_BROWSING_URL = "https://safebrowsing.googleapis.com/v4/threatMatches:find"
SAFE_BROWSING_TIMEOUT = 15.0
SAFE_BROWSING_THREAT_TYPES = [
    "MALWARE", "SOCIAL_ENGINEERING", "UNWANTED_SOFTWARE", "POTENTIALLY_HARMFUL_APPLICATION",
]
UNKNOWN_URL = "(unknown)"


def heuristic_link_check(url: Optional[str]) -> List[str]:
    """Эвристика по строке URL: слова-приманки, punycode, подозрительный TLD.

    Сеть не используется; для пустого URL возвращается пустой список.
    """
    lower = (url or "").lower()
    reasons = [f'contains "{token}"' for token in SUSPICIOUS_TOKENS if token in lower]
    if PUNYCODE_MARKER in lower:
        reasons.append(PUNYCODE_REASON)
    reasons.extend(f"tld {tld}" for tld in ODD_TLDS if lower.endswith(tld))
    return reasons


def _match_url(match: dict) -> str:
    """URL совпадения: сначала threat.url, затем threatEntry.url."""
    for key in ("threat", "threatEntry"):
        entry = match.get(key)
        if isinstance(entry, dict) and entry.get("url"):
            return entry["url"]
    return UNKNOWN_URL


class SafeBrowsingClient:
    """Пакетная проверка ссылок по базе Google Safe Browsing."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._api_key = settings.google_api_key
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def _request_body(self, urls: Sequence[str]) -> dict:
        return {
            "client": {"clientId": "mailshield", "clientVersion": "1.0"},
            "threatInfo": {
                "threatTypes": SAFE_BROWSING_THREAT_TYPES,
                "platformTypes": ["ANY_PLATFORM"],
                "threatEntryTypes": ["URL"],
                "threatEntries": [{"url": u} for u in urls],
            },
        }

    async def lookup(self, urls: Sequence[str]) -> ThreatLookupResult:
        # Без ключа проверка считается успешной и пустой
        urls = [u for u in urls if u]
        if not self.enabled or not urls:
            return ThreatLookupResult(success=True, matches=[])

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=SAFE_BROWSING_TIMEOUT) as client:
                response = await client.post(
                    SAFE_BROWSING_URL,
                    params={"key": self._api_key},
                    json=self._request_body(urls),
                )
                response.raise_for_status()
                data = response.json() if response.content else {}
        except Exception as e:
            logger.warning("SafeBrowsing API error: %s", e)
            return ThreatLookupResult(success=False, error=error_detail(e))

        raw_matches = data.get("matches") if isinstance(data, dict) else None
        matches = []
        for m in raw_matches or []:
            m = m if isinstance(m, dict) else {}
            matches.append(ThreatMatch(url=_match_url(m), threat_type=m.get("threatType") or "THREAT"))
        return ThreatLookupResult(success=True, matches=matches)
