# mailshield/config.py
import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_LANGUAGETOOL_URL = "https://api.languagetool.org/v2/check"
DEFAULT_MAX_BODY_BYTES = 2 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    """Настройки процесса. Читаются один раз при старте и больше не меняются."""
    port: int = 4000
    host: str = "0.0.0.0"
    google_api_key: str = ""
    languagetool_url: str = DEFAULT_LANGUAGETOOL_URL
    log_level: str = "INFO"
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES

    @property
    def safe_browsing_enabled(self) -> bool:
        return bool(self.google_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()  # .env подхватывается до чтения переменных
        return cls(
            port=int(os.getenv("PORT", "4000")),
            host=os.getenv("HOST", "0.0.0.0"),
            google_api_key=(os.getenv("GOOGLE_SAFE_BROWSING_API_KEY") or "").strip(),
            languagetool_url=os.getenv("LANGUAGETOOL_API_URL") or DEFAULT_LANGUAGETOOL_URL,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            max_body_bytes=int(os.getenv("MAX_BODY_BYTES", str(DEFAULT_MAX_BODY_BYTES))),
        )
