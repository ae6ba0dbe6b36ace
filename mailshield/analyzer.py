# mailshield/analyzer.py
import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from .config import Settings
from .grammar import LanguageToolClient, filter_grammar_issues
from .schemas import (
    AnalysisOptions,
    AnalysisPayload,
    AnalysisResult,
    GrammarCheckResult,
    LinkEvidence,
    LinkFinding,
    PayloadEcho,
    ThreatLookupResult,
    Verdict,
)
from .text_analyzer import find_phishing_phrases
from .url_analyzer import SafeBrowsingClient, heuristic_link_check

logger = logging.getLogger(__name__)

GRAMMAR_MIN_LENGTH = 10
GRAMMAR_WARNING_THRESHOLD = 15  # warning, если ошибок больше


def heuristic_evidence(links: Iterable[str]) -> List[LinkEvidence]:
    """Эвристика по каждой ссылке; ссылки без причин не попадают в список."""
    evidence = []
    for url in links:
        reasons = heuristic_link_check(url)
        if reasons:
            evidence.append(LinkEvidence(url=url, reasons=reasons))
    return evidence


def threat_evidence(lookup: ThreatLookupResult) -> List[LinkEvidence]:
    """Совпадения Safe Browsing; неудачная проверка просто ничего не добавляет."""
    if not lookup.success:
        return []
    return [
        LinkEvidence(url=m.url, reasons=[f"Google Safe Browsing match: {m.threat_type}"])
        for m in lookup.matches
    ]


def deduplicate_links(evidence: Iterable[LinkEvidence]) -> List[LinkFinding]:
    """Схлопывает записи с одинаковым url; причины объединяются без повторов.

    Ссылки и причины идут в порядке первого появления.
    """
    by_url: Dict[str, Dict[str, None]] = {}
    for item in evidence:
        reasons = by_url.setdefault(item.url, {})
        for reason in item.reasons:
            reasons.setdefault(reason, None)
    return [LinkFinding(url=url, reasons=", ".join(reasons)) for url, reasons in by_url.items()]


def grammar_field(result: GrammarCheckResult) -> Dict[str, Any]:
    """Поле grammar ответа: ответ LanguageTool с отфильтрованными matches или ошибка."""
    if not result.success:
        return {"error": result.error or "LanguageTool error"}
    data = dict(result.data or {})
    data["matches"] = filter_grammar_issues(result.data)
    return data


def compute_verdict(
    suspicious_links: List[LinkFinding],
    found_phrases: List[str],
    grammar: Optional[Dict[str, Any]],
) -> Verdict:
    """Ссылки и фразы всегда важнее количества грамматических ошибок."""
    if suspicious_links or found_phrases:
        return Verdict.SUSPICIOUS
    issues = grammar.get("matches") if grammar else None
    if isinstance(issues, list) and len(issues) > GRAMMAR_WARNING_THRESHOLD:
        return Verdict.WARNING
    return Verdict.SAFE


class ContentAnalyzer:
    """Собирает все проверки письма в один вердикт."""

    def __init__(
        self,
        settings: Settings,
        safe_browsing: Optional[SafeBrowsingClient] = None,
        language_tool: Optional[LanguageToolClient] = None,
    ):
        self.safe_browsing = safe_browsing or SafeBrowsingClient(settings)
        self.language_tool = language_tool or LanguageToolClient(settings)

    async def _scan_links(self, links: List[str]) -> List[LinkEvidence]:
        heuristics = heuristic_evidence(links)
        lookup = await self.safe_browsing.lookup(links)
        # Сначала Safe Browsing, затем эвристика
        return threat_evidence(lookup) + heuristics

    async def _check_grammar(self, text: str) -> Dict[str, Any]:
        result = await self.language_tool.check(text)
        return grammar_field(result)

    async def analyze(self, payload: AnalysisPayload, options: AnalysisOptions) -> AnalysisResult:
        run_links = options.link_scanner
        run_grammar = options.grammar_checker and len(payload.text) >= GRAMMAR_MIN_LENGTH

        # --- 1. Внешние проверки (Safe Browsing и LanguageTool) идут параллельно ---
        async def _nothing():
            return None

        link_evidence, grammar = await asyncio.gather(
            self._scan_links(payload.links) if run_links else _nothing(),
            self._check_grammar(payload.text) if run_grammar else _nothing(),
        )

        # --- 2. Фразы-триггеры проверяются всегда ---
        found_phrases = find_phishing_phrases(payload.text)

        # --- 3. Дедупликация ссылок и вердикт ---
        suspicious_links = deduplicate_links(link_evidence or [])
        overall = compute_verdict(suspicious_links, found_phrases, grammar)
        logger.debug(
            "analysis done: links=%d phrases=%d overall=%s",
            len(suspicious_links), len(found_phrases), overall.value,
        )

        return AnalysisResult(
            payload=PayloadEcho(
                subject=payload.subject,
                snippet=payload.snippet,
                text_length=len(payload.text),
            ),
            suspicious_links=suspicious_links,
            grammar=grammar,
            found_phrases=found_phrases,
            overall=overall,
        )
