# mailshield/grammar.py
import logging
from typing import Any, List, Optional

import httpx

from .config import Settings
from .external import error_detail
from .schemas import GrammarCheckResult

logger = logging.getLogger(__name__)

LANGUAGE = "en-US"
LANGUAGETOOL_TIMEOUT = 20.0

# Правила, срабатывания которых всегда отбрасываются
SUPPRESSED_RULES = (
    "MORFOLOGIK_RULE_EN_US",         # большинство ложных срабатываний орфографии
    "COMMA_PARENTHESIS_WHITESPACE",  # мелкие пробелы
    "SEND_AN_EMAIL",                 # стилистика
    "MISSING_COMMA_AFTER_YEAR",      # запятые в датах
    "EN_DASH_RULE",                  # стиль тире
    "EN_QUOTES",                     # стиль кавычек
)


def _trimmed_len(value: Any) -> int:
    return len(value.strip()) if isinstance(value, str) else 0


def filter_grammar_issues(issues: Optional[Any]) -> List[dict]:
    """Оставляет только существенные ошибки из ответа LanguageTool."""
    if not isinstance(issues, dict) or not isinstance(issues.get("matches"), list):
        return []

    matches = [i for i in issues["matches"] if isinstance(i, dict)]
    matches = [i for i in matches if i.get("severity") == "error"]
    matches = [i for i in matches if _trimmed_len(i.get("message")) > 5]
    matches = [i for i in matches if _trimmed_len(i.get("context")) > 10]
    return [i for i in matches if i.get("ruleId") not in SUPPRESSED_RULES]


class LanguageToolClient:
    """Проверка грамматики через LanguageTool (один запрос на весь текст)."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._url = settings.languagetool_url
        self._transport = transport

    async def check(self, text: str) -> GrammarCheckResult:
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=LANGUAGETOOL_TIMEOUT) as client:
                response = await client.post(self._url, data={"text": text, "language": LANGUAGE})
                response.raise_for_status()
                data = response.json()
        except Exception as e:
            logger.warning("LanguageTool error: %s", e)
            return GrammarCheckResult(success=False, error=error_detail(e))

        if not isinstance(data, dict):
            return GrammarCheckResult(success=True, data={})
        return GrammarCheckResult(success=True, data=data)
