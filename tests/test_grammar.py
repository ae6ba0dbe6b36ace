from urllib.parse import parse_qs

import httpx
import pytest

from mailshield.config import Settings
from mailshield.grammar import SUPPRESSED_RULES, LanguageToolClient, filter_grammar_issues

from .conftest import grammar_issue


class TestFilterGrammarIssues:

    def test_keeps_real_errors(self):
        issue = grammar_issue()
        assert filter_grammar_issues({"matches": [issue]}) == [issue]

    def test_drops_non_error_severity(self):
        issues = [grammar_issue(severity="warning"), grammar_issue(severity="style")]
        assert filter_grammar_issues({"matches": issues}) == []

    def test_drops_short_message_and_context(self):
        issues = [
            grammar_issue(message="  Typo  "),
            grammar_issue(context="   short    "),
            grammar_issue(message=None),
        ]
        assert filter_grammar_issues({"matches": issues}) == []

    def test_length_boundaries(self):
        ok = grammar_issue(message="sixsix", context="elevenchars")
        short = grammar_issue(message="five5", context="tencharsxx")
        assert filter_grammar_issues({"matches": [ok, short]}) == [ok]

    def test_suppressed_rules(self):
        issues = [grammar_issue(rule_id=r) for r in SUPPRESSED_RULES]
        kept = grammar_issue(rule_id="MORFOLOGIK_RULE_EN_US_EXTRA")
        assert filter_grammar_issues({"matches": issues + [kept]}) == [kept]

    def test_idempotent(self):
        raw = {"matches": [
            grammar_issue(),
            grammar_issue(severity="hint"),
            grammar_issue(rule_id="EN_QUOTES"),
            grammar_issue(rule_id="AGREEMENT", context="Another longer context."),
        ]}
        once = filter_grammar_issues(raw)
        assert filter_grammar_issues({"matches": once}) == once

    def test_malformed_input(self):
        assert filter_grammar_issues(None) == []
        assert filter_grammar_issues({}) == []
        assert filter_grammar_issues({"matches": "nope"}) == []
        assert filter_grammar_issues(["not", "a", "dict"]) == []


def _client(handler):
    settings = Settings(languagetool_url="https://lt.test/v2/check")
    return LanguageToolClient(settings, transport=httpx.MockTransport(handler))


class TestLanguageToolClient:

    @pytest.mark.asyncio
    async def test_form_encoded_request(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["content_type"] = request.headers["content-type"]
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={"language": {"code": "en-US"}, "matches": []})

        result = await _client(handler).check("Some text to check.")

        assert result.success is True
        assert result.data == {"language": {"code": "en-US"}, "matches": []}
        assert seen["url"] == "https://lt.test/v2/check"
        assert seen["content_type"].startswith("application/x-www-form-urlencoded")
        assert seen["form"] == {"text": ["Some text to check."], "language": ["en-US"]}

    @pytest.mark.asyncio
    async def test_service_error_is_soft(self):
        def handler(request):
            return httpx.Response(503, text="Service Unavailable")

        result = await _client(handler).check("Some text to check.")
        assert result.success is False
        assert result.error == "Service Unavailable"

    @pytest.mark.asyncio
    async def test_transport_error_is_soft(self):
        def handler(request):
            raise httpx.ConnectTimeout("connect timeout", request=request)

        result = await _client(handler).check("Some text to check.")
        assert result.success is False
        assert result.error == "connect timeout"

    @pytest.mark.asyncio
    async def test_unparsable_url_is_soft(self):
        client = LanguageToolClient(Settings(languagetool_url="http://[::1/check"))

        result = await client.check("Some text to check.")

        assert result.success is False
        assert result.error
