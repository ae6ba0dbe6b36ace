from .analyzer import ContentAnalyzer
from .config import Settings

__all__ = ["ContentAnalyzer", "Settings"]
