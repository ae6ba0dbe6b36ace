# mailshield/schemas.py

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MAX_TEXT_LENGTH = 30000
MAX_LINKS = 50
SNIPPET_LENGTH = 200


class CamelModel(BaseModel):
    """Базовая модель: поля в JSON в camelCase, в Python в snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PayloadIn(CamelModel):
    """Письмо в том виде, в каком его прислал клиент. Все поля опциональны."""
    text: Optional[str] = None
    subject: Optional[str] = None
    snippet: Optional[str] = None
    links: Optional[List[Optional[str]]] = None


class AnalysisOptions(CamelModel):
    """Какие проверки включены для запроса."""
    link_scanner: bool = False
    grammar_checker: bool = False


class AnalyzeRequest(CamelModel):
    payload: Optional[PayloadIn] = None
    options: Optional[AnalysisOptions] = None


class AnalysisPayload(BaseModel):
    """Нормализованное письмо: текст и ссылки обрезаны, snippet вычислен."""
    model_config = ConfigDict(frozen=True)

    text: str
    subject: str
    snippet: str
    links: List[str]

    @classmethod
    def from_request(cls, raw: PayloadIn) -> "AnalysisPayload":
        text = (raw.text or "")[:MAX_TEXT_LENGTH]
        return cls(
            text=text,
            subject=raw.subject or "",
            snippet=raw.snippet or text[:SNIPPET_LENGTH],
            links=[link or "" for link in (raw.links or [])[:MAX_LINKS]],
        )


class ThreatMatch(BaseModel):
    """Одно совпадение из Google Safe Browsing."""
    url: str
    threat_type: str


class ThreatLookupResult(BaseModel):
    """Результат обращения к Safe Browsing: успех со списком совпадений или ошибка."""
    success: bool
    matches: List[ThreatMatch] = Field(default_factory=list)
    error: Optional[Any] = None


class GrammarCheckResult(BaseModel):
    """Результат обращения к LanguageTool: сырой ответ сервиса или ошибка."""
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[Any] = None


class LinkEvidence(BaseModel):
    """Подозрительная ссылка с причинами от одного источника (до дедупликации)."""
    url: str
    reasons: List[str]


class LinkFinding(CamelModel):
    """Итоговая запись о ссылке: причины собраны в одну строку через запятую."""
    url: str
    reasons: str


class Verdict(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    SUSPICIOUS = "suspicious"


class PayloadEcho(CamelModel):
    subject: str
    snippet: str
    text_length: int


class AnalysisResult(CamelModel):
    """Полный отчет по результатам анализа."""
    success: bool = True
    payload: PayloadEcho
    suspicious_links: List[LinkFinding]
    grammar: Optional[Dict[str, Any]] = None
    found_phrases: List[str]
    overall: Verdict


class ErrorResponse(CamelModel):
    success: bool = False
    error: Any
