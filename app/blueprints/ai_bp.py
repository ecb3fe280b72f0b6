"""
RiskWise — Risk & Issue Dashboard
AI Blueprint — form helpers and the data analyst.

Endpoints:
    FORM HELPERS  /api/v1/ai/rephrase               POST  {text}
                  /api/v1/ai/suggest-title          POST  {text}
                  /api/v1/ai/suggest-category       POST  {text}
                  /api/v1/ai/suggest-mitigations    POST  {text, context?}
                  /api/v1/ai/similar                POST  {text}

    ANALYST       /api/v1/ai/ask                    POST  {question, type?, status?, projectName?}

    PROMPTS       /api/v1/ai/prompts                GET

Rate limited per blueprint (AI_RATE_LIMIT). Helpers degrade to empty /
echo results when the model is unavailable; only a missing input is an
error.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from app.ai.assistants import RiskAssistant
from app.ai.gateway import LLMGateway
from app.ai.prompt_registry import PromptRegistry
from app.blueprints import register_error_handlers
from app.services.normalizer import resolve_type
from app.services.risk_issue_service import load_snapshot
from app.utils.errors import E, api_error

logger = logging.getLogger(__name__)

ai_bp = Blueprint("ai", __name__, url_prefix="/api/v1/ai")
register_error_handlers(ai_bp)


# ── Lazy singletons stored on Flask app (test-isolation safe) ───────────────

def _get_gateway():
    if not hasattr(current_app, "_ai_gateway"):
        current_app._ai_gateway = LLMGateway.from_config(current_app.config)
    return current_app._ai_gateway


def _get_prompt_registry():
    if not hasattr(current_app, "_ai_prompt_registry"):
        current_app._ai_prompt_registry = PromptRegistry()
    return current_app._ai_prompt_registry


def _get_assistant():
    if not hasattr(current_app, "_ai_risk_assistant"):
        current_app._ai_risk_assistant = RiskAssistant(
            gateway=_get_gateway(),
            prompt_registry=_get_prompt_registry(),
        )
    return current_app._ai_risk_assistant


def _required_text(data: dict, key: str = "text"):
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        return None, api_error(E.VALIDATION_REQUIRED, f"{key} is required")
    return value.strip(), None


# ══════════════════════════════════════════════════════════════════════════════
# FORM HELPERS
# ══════════════════════════════════════════════════════════════════════════════

@ai_bp.route("/rephrase", methods=["POST"])
def rephrase():
    text, err = _required_text(request.get_json(silent=True) or {})
    if err:
        return err
    return jsonify(_get_assistant().rephrase(text))


@ai_bp.route("/suggest-title", methods=["POST"])
def suggest_title():
    text, err = _required_text(request.get_json(silent=True) or {})
    if err:
        return err
    return jsonify(_get_assistant().suggest_title(text))


@ai_bp.route("/suggest-category", methods=["POST"])
def suggest_category():
    text, err = _required_text(request.get_json(silent=True) or {})
    if err:
        return err
    return jsonify(_get_assistant().suggest_category(text))


@ai_bp.route("/suggest-mitigations", methods=["POST"])
def suggest_mitigations():
    data = request.get_json(silent=True) or {}
    text, err = _required_text(data)
    if err:
        return err
    return jsonify(_get_assistant().suggest_mitigations(text, data.get("context")))


@ai_bp.route("/similar", methods=["POST"])
def similar():
    """Possible duplicates of a description among the current records."""
    text, err = _required_text(request.get_json(silent=True) or {})
    if err:
        return err
    snapshot = load_snapshot()
    return jsonify(_get_assistant().find_similar(text, snapshot.records))


# ══════════════════════════════════════════════════════════════════════════════
# DATA ANALYST
# ══════════════════════════════════════════════════════════════════════════════

@ai_bp.route("/ask", methods=["POST"])
def ask():
    data = request.get_json(silent=True) or {}
    question, err = _required_text(data, "question")
    if err:
        return err

    record_type = data.get("type")
    if record_type and resolve_type(record_type) is None:
        return api_error(E.VALIDATION_REQUIRED, "type must be Risk or Issue")

    snapshot = load_snapshot()
    result = _get_assistant().answer_question(
        question,
        snapshot.records,
        dataset_tag=resolve_type(record_type) if record_type else "all",
        type=record_type,
        status=data.get("status"),
        project_name=data.get("projectName"),
    )
    return jsonify(result)


# ══════════════════════════════════════════════════════════════════════════════
# PROMPTS
# ══════════════════════════════════════════════════════════════════════════════

@ai_bp.route("/prompts", methods=["GET"])
def list_prompts():
    """Registered prompt templates (name, version, previews)."""
    return jsonify({"templates": _get_prompt_registry().list_templates()})
