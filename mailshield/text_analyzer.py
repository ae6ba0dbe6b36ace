# mailshield/text_analyzer.py
from typing import List

# Фразы-триггеры фишинговых писем; порядок важен для ответа
PHISHING_PHRASES = [
    "you won", "claim your", "click here", "verify your account",
    "update your account", "urgent", "congratulations", "prize", "winner",
]


def find_phishing_phrases(text: str) -> List[str]:
    """Возвращает фразы из словаря, которые встречаются в тексте (без учета регистра)."""
    lower = (text or "").lower()
    return [phrase for phrase in PHISHING_PHRASES if phrase in lower]
