"""
RiskWise — Risk & Issue Dashboard
Risk Assistant: AI helpers for the entry forms and the data analyst panel.

Every helper follows the same pipeline:
    1. Render the prompt from the PromptRegistry
    2. Call the LLM through the LLMGateway (JSON output)
    3. Parse the JSON object out of the reply
    4. On any failure return an empty / echo result with ``error`` set

Helpers never raise to the caller; the forms keep working without AI.
"""

import json
import logging
import re

from app.core.exceptions import UpstreamError
from app.models.risk_issue import ISSUE_CATEGORIES
from app.services.risk_issue_service import query_records

logger = logging.getLogger(__name__)

SIMILAR_CANDIDATE_LIMIT = 5
SIMILAR_MIN_OVERLAP = 0.15
ANSWER_CONTEXT_ROWS = 50

_WORD_RE = re.compile(r"[a-z0-9]+")
_STOP_WORDS = {
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "in", "is",
    "it", "may", "of", "on", "or", "that", "the", "to", "will", "with",
}


def _tokens(text: str) -> set[str]:
    return {w for w in _WORD_RE.findall((text or "").lower()) if w not in _STOP_WORDS and len(w) > 1}


def _overlap(a: set[str], b: set[str]) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def _parse_json_object(content: str) -> dict | None:
    """Pull the first JSON object out of an LLM reply (tolerates code fences)."""
    try:
        match = re.search(r"\{.*\}", content or "", re.DOTALL)
        parsed = json.loads(match.group() if match else content)
    except (json.JSONDecodeError, TypeError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _narrative(record) -> str:
    if record.is_risk:
        return record.fields.get("Description") or ""
    return record.fields.get("Discussion") or ""


class RiskAssistant:
    """AI-assisted form filling and question answering over risk/issue data."""

    def __init__(self, gateway=None, prompt_registry=None):
        self.gateway = gateway
        self.prompt_registry = prompt_registry

    # ── Core call ────────────────────────────────────────────────────────

    def _ask(self, prompt_name: str, **variables) -> tuple[dict | None, str | None]:
        """Render, call and parse. Returns (parsed_json, error)."""
        if not self.gateway or not self.prompt_registry:
            return None, "AI assistant not configured"
        try:
            messages = self.prompt_registry.render(prompt_name, **variables)
        except KeyError as exc:
            logger.error("Missing prompt template: %s", exc)
            return None, str(exc)

        try:
            llm_result = self.gateway.chat(
                messages, purpose=prompt_name, temperature=0.3, json_output=True,
            )
        except UpstreamError as exc:
            logger.warning("AI %s unavailable: %s", prompt_name, exc)
            return None, "AI service unavailable"

        parsed = _parse_json_object(llm_result.get("content", ""))
        if parsed is None:
            logger.warning("Failed to parse %s response", prompt_name)
            return None, "Could not parse AI response"
        return parsed, None

    # ── Form helpers ─────────────────────────────────────────────────────

    def rephrase(self, text: str) -> dict:
        """Clearer wording for a description. Falls back to the input text."""
        parsed, error = self._ask("rephrase", description=text)
        rephrased = (parsed or {}).get("rephrasedDescription")
        if not isinstance(rephrased, str) or not rephrased.strip():
            rephrased = text
        return {"rephrasedDescription": rephrased, "error": error}

    def suggest_title(self, text: str) -> dict:
        parsed, error = self._ask("suggest_title", description=text)
        title = (parsed or {}).get("title")
        return {"title": title.strip() if isinstance(title, str) else "", "error": error}

    def suggest_category(self, text: str) -> dict:
        """Category restricted to the issue categories; unknown answers are discarded."""
        parsed, error = self._ask(
            "suggest_category", description=text, categories=", ".join(ISSUE_CATEGORIES),
        )
        parsed = parsed or {}
        category = parsed.get("category")
        if category not in ISSUE_CATEGORIES:
            category = None
        sub = parsed.get("subCategory")
        return {
            "category": category,
            "subCategory": sub if isinstance(sub, str) else None,
            "error": error,
        }

    def suggest_mitigations(self, text: str, context: str | None = None) -> dict:
        parsed, error = self._ask(
            "suggest_mitigations", description=text, context=context or "None provided",
        )
        strategies = (parsed or {}).get("suggestedMitigationStrategies")
        if not isinstance(strategies, list):
            strategies = []
        return {
            "suggestedMitigationStrategies": [str(s) for s in strategies if s][:5],
            "error": error,
        }

    def find_similar(self, text: str, records) -> dict:
        """
        Look for an existing record that duplicates ``text``.

        Candidates are pre-ranked by word overlap with each record's title
        and narrative; the LLM only confirms which candidate (if any) is a
        real duplicate. Without LLM confirmation the lexical ranking is
        still returned. When nothing matches, the description comes back
        rephrased so the form can offer it instead.

        Returns:
            dict: candidates [{id, type, title, projectName, score}],
                  match (one candidate or None), matchedRecord (the full
                  record or None), rephrasedDescription (None on a match),
                  reason, error
        """
        wanted = _tokens(text)
        ranked = []
        for record in records:
            score = _overlap(wanted, _tokens(f"{record.title} {_narrative(record)}"))
            if score >= SIMILAR_MIN_OVERLAP:
                ranked.append((score, record))
        ranked.sort(key=lambda pair: pair[0], reverse=True)

        top = ranked[:SIMILAR_CANDIDATE_LIMIT]
        candidates = [
            {
                "id": record.id,
                "type": record.type,
                "title": record.title,
                "projectName": record.project_name,
                "score": round(score, 3),
            }
            for score, record in top
        ]
        result = {
            "candidates": candidates,
            "match": None,
            "matchedRecord": None,
            "rephrasedDescription": None,
            "reason": "",
            "error": None,
        }
        if not candidates:
            result["reason"] = "No similar records found."
            return self._with_rephrase(result, text)

        listing = "\n".join(
            f"[{i}] {c['type']} '{c['title']}' ({c['projectName']})" for i, c in enumerate(candidates)
        )
        parsed, error = self._ask("find_similar", description=text, candidates=listing)
        result["error"] = error
        if parsed is None:
            return self._with_rephrase(result, text)

        index = parsed.get("matchIndex")
        reason = parsed.get("reason")
        result["reason"] = reason if isinstance(reason, str) else ""
        if isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(candidates):
            result["match"] = candidates[index]
            result["matchedRecord"] = top[index][1].to_dict()
            return result
        return self._with_rephrase(result, text)

    def _with_rephrase(self, result: dict, text: str) -> dict:
        """No duplicate: offer a clearer wording of ``text`` instead."""
        rephrased = self.rephrase(text)
        result["rephrasedDescription"] = rephrased["rephrasedDescription"]
        result["error"] = result["error"] or rephrased["error"]
        return result

    # ── Data analyst ─────────────────────────────────────────────────────

    def answer_question(self, question: str, records, dataset_tag: str = "all", *,
                        type=None, status=None, project_name=None, now=None) -> dict:
        """
        Answer a natural-language question over an explicit record batch.

        The batch is narrowed with ``query_records`` (type / status /
        project-name filters, last twelve months, row cap) before it is
        serialized into the prompt.

        Returns:
            dict: analysis, rowCount, dataset, error
        """
        rows = query_records(records, type=type, status=status,
                             project_name=project_name, now=now)
        context = json.dumps(rows[:ANSWER_CONTEXT_ROWS], default=str)
        parsed, error = self._ask(
            "answer_question",
            dataset=dataset_tag,
            row_count=len(rows),
            context=context,
            question=question,
        )
        analysis = (parsed or {}).get("analysis")
        if not isinstance(analysis, str):
            analysis = ""
        return {"analysis": analysis, "rowCount": len(rows), "dataset": dataset_tag, "error": error}
