import pytest

from mailshield.config import Settings
from mailshield.schemas import GrammarCheckResult, ThreatLookupResult, ThreatMatch


class FakeSafeBrowsing:
    """Подменяет SafeBrowsingClient: отдает заранее заданный результат."""

    def __init__(self, result=None):
        self.result = result or ThreatLookupResult(success=True, matches=[])
        self.calls = []

    async def lookup(self, urls):
        self.calls.append(list(urls))
        return self.result


class FakeLanguageTool:
    """Подменяет LanguageToolClient."""

    def __init__(self, result=None):
        self.result = result or GrammarCheckResult(success=True, data={"matches": []})
        self.calls = []

    async def check(self, text):
        self.calls.append(text)
        return self.result


def grammar_issue(rule_id="SOME_RULE", severity="error",
                  message="Possible agreement error here.",
                  context="The cats sits on the warm mat today."):
    return {"severity": severity, "message": message, "context": context, "ruleId": rule_id}


def threat_match(url, threat_type="MALWARE"):
    return ThreatMatch(url=url, threat_type=threat_type)


@pytest.fixture
def settings():
    return Settings(google_api_key="test-key", languagetool_url="https://lt.test/v2/check")


@pytest.fixture
def safe_browsing():
    return FakeSafeBrowsing()


@pytest.fixture
def language_tool():
    return FakeLanguageTool()
