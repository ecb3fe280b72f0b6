"""
RiskWise — Risk & Issue Dashboard
Tests — AI layer: gateway, prompt registry, risk assistant, AI endpoints.

All calls go through the deterministic LocalStubProvider (no API key in
testing), so the assertions below are stable.
"""

import pytest

from app.ai.assistants import RiskAssistant
from app.ai.gateway import LLMGateway, LLMProvider
from app.ai.prompt_registry import PromptRegistry
from app.core.exceptions import UpstreamError
from app.services.risk_issue_service import build_records

PRODUCTS = [{"id": "prod-001", "code": "P-12345", "name": "Project Phoenix"}]
TEXT = "Primary vendor may miss the Q3 delivery milestone."


class _FailingProvider(LLMProvider):
    def __init__(self):
        self.calls = 0

    def chat(self, messages, model, **kwargs):
        self.calls += 1
        raise RuntimeError("connection reset")


class _FixedProvider(LLMProvider):
    def __init__(self, content):
        self.content = content

    def chat(self, messages, model, **kwargs):
        return {"content": self.content, "prompt_tokens": 1, "completion_tokens": 1, "model": model}


def _gateway(provider=None):
    gw = LLMGateway(retry_backoff=0)
    if provider is not None:
        gw._providers["local"] = provider
    return gw


@pytest.fixture()
def assistant():
    return RiskAssistant(gateway=_gateway(), prompt_registry=PromptRegistry())


# ═════════════════════════════════════════════════════════════════════════════
# GATEWAY
# ═════════════════════════════════════════════════════════════════════════════

class TestGateway:
    def test_falls_back_to_local_stub(self):
        gw = _gateway()
        assert gw.provider_names == ["local"]
        result = gw.chat([{"role": "user", "content": "Text: hello"}], purpose="suggest_title")
        assert result["provider"] == "local"
        assert result["model"] == "local-stub"
        assert "latency_ms" in result

    def test_retries_then_raises_upstream(self):
        provider = _FailingProvider()
        with pytest.raises(UpstreamError):
            _gateway(provider).chat([{"role": "user", "content": "x"}], max_retries=3)
        assert provider.calls == 3

    def test_from_config(self, app):
        gw = LLMGateway.from_config(app.config)
        assert gw.retry_backoff == 0
        assert "gemini" not in gw.provider_names


# ═════════════════════════════════════════════════════════════════════════════
# PROMPT REGISTRY
# ═════════════════════════════════════════════════════════════════════════════

class TestPromptRegistry:
    def test_defaults_registered(self, tmp_path):
        registry = PromptRegistry(prompts_dir=str(tmp_path))
        names = {t["name"] for t in registry.list_templates()}
        assert names == {"rephrase", "suggest_title", "suggest_category",
                         "suggest_mitigations", "find_similar", "answer_question"}

    def test_render_substitutes_and_keeps_unknown(self, tmp_path):
        registry = PromptRegistry(prompts_dir=str(tmp_path))
        messages = registry.render("suggest_category", description="late vendor")
        assert messages[0]["role"] == "system"
        assert "{{categories}}" in messages[0]["content"]
        assert messages[-1]["content"].endswith("late vendor")

    def test_unknown_template(self, tmp_path):
        with pytest.raises(KeyError):
            PromptRegistry(prompts_dir=str(tmp_path)).render("nope")

    def test_yaml_override(self, tmp_path):
        (tmp_path / "suggest_title.yaml").write_text(
            "name: suggest_title\n"
            "version: v1\n"
            "system: Short titles only.\n"
            "user: 'Description: {{description}}'\n",
            encoding="utf-8",
        )
        (tmp_path / "broken.yaml").write_text("name: [unclosed\n", encoding="utf-8")
        registry = PromptRegistry(prompts_dir=str(tmp_path))
        assert registry.get("suggest_title").system == "Short titles only."
        assert registry.get("rephrase") is not None

    def test_shipped_overrides_load(self):
        registry = PromptRegistry()
        assert "Question: {{question}}" in registry.get("answer_question").user


# ═════════════════════════════════════════════════════════════════════════════
# RISK ASSISTANT
# ═════════════════════════════════════════════════════════════════════════════

class TestFormHelpers:
    def test_rephrase(self, assistant):
        result = assistant.rephrase("vendor   may slip")
        assert result == {"rephrasedDescription": "Vendor may slip.", "error": None}

    def test_suggest_title(self, assistant):
        result = assistant.suggest_title(TEXT)
        assert result["title"].startswith("Primary vendor may miss")
        assert result["error"] is None

    def test_suggest_category(self, assistant):
        assert assistant.suggest_category(TEXT) == {
            "category": "Contractual", "subCategory": "Vendor Management", "error": None}

    def test_category_outside_list_discarded(self):
        gw = _gateway(_FixedProvider('{"category": "Budget", "subCategory": "Overrun"}'))
        result = RiskAssistant(gw, PromptRegistry()).suggest_category(TEXT)
        assert result["category"] is None
        assert result["subCategory"] == "Overrun"

    def test_suggest_mitigations(self, assistant):
        result = assistant.suggest_mitigations(TEXT, context="Fixed-price contract")
        assert len(result["suggestedMitigationStrategies"]) == 3
        assert result["error"] is None

    def test_fenced_json_reply(self):
        gw = _gateway(_FixedProvider('```json\n{"title": "Vendor slip"}\n```'))
        assert RiskAssistant(gw, PromptRegistry()).suggest_title(TEXT)["title"] == "Vendor slip"


class TestFailureModes:
    def test_gateway_failure_returns_error(self):
        assistant = RiskAssistant(_gateway(_FailingProvider()), PromptRegistry())
        result = assistant.rephrase("vendor may slip")
        assert result["rephrasedDescription"] == "vendor may slip"
        assert result["error"] == "AI service unavailable"

        assert assistant.suggest_mitigations(TEXT)["suggestedMitigationStrategies"] == []

    def test_unparseable_reply(self):
        assistant = RiskAssistant(_gateway(_FixedProvider("I cannot help with that")), PromptRegistry())
        result = assistant.suggest_title(TEXT)
        assert result == {"title": "", "error": "Could not parse AI response"}

    def test_not_configured(self):
        assert RiskAssistant().suggest_title(TEXT)["error"] == "AI assistant not configured"


class TestFindSimilar:
    def test_best_candidate_confirmed(self, assistant, make_risk, make_issue):
        records = build_records([make_risk(id="r1")], [make_issue(id="i1")], PRODUCTS).records
        result = assistant.find_similar(TEXT, records)
        assert [c["id"] for c in result["candidates"]] == ["r1"]
        assert result["match"]["id"] == "r1"
        assert result["match"]["projectName"] == "Project Phoenix"
        assert result["matchedRecord"]["id"] == "r1"
        assert result["matchedRecord"]["Description"] == TEXT
        assert result["matchedRecord"]["riskLevel"] == "Medium"
        assert result["rephrasedDescription"] is None
        assert result["error"] is None

    def test_no_candidates_rephrases(self, assistant, make_issue):
        records = build_records([], [make_issue()], PRODUCTS).records
        result = assistant.find_similar("quarterly marketing budget review", records)
        assert result["candidates"] == []
        assert result["match"] is None
        assert result["matchedRecord"] is None
        assert result["rephrasedDescription"] == "Quarterly marketing budget review."

    def test_unconfirmed_candidate_rephrases(self, make_risk):
        gw = _gateway(_FixedProvider('{"matchIndex": null, "reason": "Different vendor"}'))
        records = build_records([make_risk(id="r1")], [], PRODUCTS).records
        result = RiskAssistant(gw, PromptRegistry()).find_similar(TEXT, records)
        assert [c["id"] for c in result["candidates"]] == ["r1"]
        assert result["matchedRecord"] is None
        assert result["reason"] == "Different vendor"
        assert result["rephrasedDescription"] == TEXT


class TestAnswerQuestion:
    def test_uses_filtered_rows(self, assistant, make_risk, make_issue):
        records = build_records(
            [make_risk(id="r1", DueDate="2026-09-01")],
            [make_issue(id="i1", **{"Due Date": "2026-09-01"})],
            PRODUCTS,
        ).records
        result = assistant.answer_question(
            "How many risks are open?", records, "Risk", type="Risk", now="2026-10-19",
        )
        assert result["rowCount"] == 1
        assert result["dataset"] == "Risk"
        assert "Based on 1 matching record(s)" in result["analysis"]


# ═════════════════════════════════════════════════════════════════════════════
# API
# ═════════════════════════════════════════════════════════════════════════════

class TestAiApi:
    @pytest.mark.parametrize("path", [
        "rephrase", "suggest-title", "suggest-category", "suggest-mitigations", "similar",
    ])
    def test_text_required(self, client, path):
        res = client.post(f"/api/v1/ai/{path}", json={"text": "  "})
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_REQUIRED"

    def test_suggest_category(self, client):
        res = client.post("/api/v1/ai/suggest-category", json={"text": "Hiring freeze leaves the team short"})
        assert res.status_code == 200
        assert res.get_json()["category"] == "Resource"

    def test_similar_reads_store(self, client, store, products, make_risk):
        store.create("risks", make_risk())
        body = client.post("/api/v1/ai/similar", json={"text": TEXT}).get_json()
        assert len(body["candidates"]) == 1
        assert body["match"]["title"] == "Vendor delivery slip"

    def test_ask(self, client, store, products, make_issue):
        store.create("issues", make_issue(**{"Due Date": None}))
        body = client.post("/api/v1/ai/ask", json={"question": "What is open?", "type": "Issue"}).get_json()
        assert body["rowCount"] == 1
        assert body["dataset"] == "Issue"

    def test_ask_validation(self, client):
        assert client.post("/api/v1/ai/ask", json={}).status_code == 400
        assert client.post("/api/v1/ai/ask", json={"question": "q", "type": "Action"}).status_code == 400

    def test_prompts(self, client):
        templates = client.get("/api/v1/ai/prompts").get_json()["templates"]
        assert {"rephrase", "answer_question"} <= {t["name"] for t in templates}
