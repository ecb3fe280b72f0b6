"""
RiskWise — Risk & Issue Dashboard
LLM Gateway.

Provider-agnostic LLM router with:
    - Gemini (google-genai) for real suggestions
    - Deterministic local stub for dev/test without an API key
    - Auto-retry with exponential backoff
    - Token + latency logging

Usage:
    from app.ai.gateway import LLMGateway
    gw = LLMGateway()
    result = gw.chat([{"role": "user", "content": "Suggest a title ..."}], purpose="suggest_title")
"""

import json
import logging
import os
import re
import time
from abc import ABC, abstractmethod

from app.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


# ── Provider Abstract Base ────────────────────────────────────────────────────

class LLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    def chat(self, messages: list, model: str, **kwargs) -> dict:
        """
        Send a chat completion request.

        Args:
            messages: List of {"role": "...", "content": "..."} dicts.
            model: Model identifier string.
            **kwargs: temperature, max_tokens, etc.

        Returns:
            dict with keys: content, prompt_tokens, completion_tokens, model
        """
        ...


# ── Google Gemini Provider ───────────────────────────────────────────────────

class GeminiProvider(LLMProvider):
    """
    Google Gemini API provider.

    Models:
        - gemini-2.5-flash  (titles, rephrasing, categories)
        - gemini-2.5-pro    (data analyst answers)

    Environment:
        GEMINI_API_KEY — obtain at https://aistudio.google.com/apikey
    """

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key or os.getenv("GEMINI_API_KEY", "")
        self._client = None

    def _get_client(self):
        if self._client is None:
            from google import genai
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def chat(self, messages: list, model: str = "gemini-2.5-flash", **kwargs) -> dict:
        client = self._get_client()
        from google.genai import types

        # Gemini takes the system prompt separately and uses "model" for assistant turns
        system_parts = []
        contents = []
        for m in messages:
            if m["role"] == "system":
                system_parts.append(m["content"])
                continue
            role = "model" if m["role"] == "assistant" else "user"
            contents.append(types.Content(role=role, parts=[types.Part(text=m["content"])]))

        config = types.GenerateContentConfig(
            temperature=kwargs.get("temperature", 0.3),
            max_output_tokens=kwargs.get("max_tokens", 2048),
        )
        if system_parts:
            config.system_instruction = "\n\n".join(system_parts)
        if kwargs.get("json_output"):
            config.response_mime_type = "application/json"

        response = client.models.generate_content(model=model, contents=contents, config=config)

        usage = response.usage_metadata
        return {
            "content": response.text or "",
            "prompt_tokens": getattr(usage, "prompt_token_count", 0) or 0,
            "completion_tokens": getattr(usage, "candidates_token_count", 0) or 0,
            "model": model,
        }


# ── Local Stub Provider (for dev/test without API keys) ──────────────────────

class LocalStubProvider(LLMProvider):
    """
    Deterministic responses keyed on the prompt's purpose.
    No API key required; output depends only on the input text.
    """

    def chat(self, messages: list, model: str = "local-stub", **kwargs) -> dict:
        user_msg = ""
        for m in reversed(messages):
            if m["role"] == "user":
                user_msg = m["content"]
                break

        content = self._generate_stub_response(kwargs.get("purpose", ""), user_msg)
        return {
            "content": content,
            "prompt_tokens": len(user_msg.split()) * 2,
            "completion_tokens": len(content.split()) * 2,
            "model": "local-stub",
        }

    @staticmethod
    def _input_text(user_msg: str) -> str:
        """Text after the last 'Description:' / 'Text:' marker, else the whole message."""
        match = re.search(r"(?:Description|Text):\s*(.*)\Z", user_msg, re.DOTALL)
        return (match.group(1) if match else user_msg).strip()

    @classmethod
    def _generate_stub_response(cls, purpose: str, user_msg: str) -> str:
        text = cls._input_text(user_msg)
        lower = text.lower()

        if purpose == "rephrase":
            sentence = " ".join(text.split())
            if sentence:
                sentence = sentence[0].upper() + sentence[1:]
                if not sentence.endswith("."):
                    sentence += "."
            return json.dumps({"rephrasedDescription": sentence})

        if purpose == "suggest_title":
            words = re.findall(r"[A-Za-z0-9$%-]+", text)[:8]
            return json.dumps({"title": " ".join(words).capitalize() or "Untitled"})

        if purpose == "suggest_category":
            if any(k in lower for k in ("contract", "vendor", "supplier", "legal")):
                category, sub = "Contractual", "Vendor Management"
            elif any(k in lower for k in ("staff", "resource", "team", "hiring")):
                category, sub = "Resource", "Staffing"
            elif any(k in lower for k in ("delay", "schedule", "deadline", "late")):
                category, sub = "Schedule", "Milestone Slippage"
            else:
                category, sub = "Technical", "System Integration"
            return json.dumps({"category": category, "subCategory": sub})

        if purpose == "suggest_mitigations":
            return json.dumps({"suggestedMitigationStrategies": [
                "Assign a named owner and review progress weekly",
                "Agree a fallback plan with the affected stakeholders",
                "Ring-fence contingency budget for the exposure",
            ]})

        if purpose == "find_similar":
            # Candidates are pre-ranked lexically; the stub confirms the best one
            has_candidates = "[0]" in user_msg
            return json.dumps({
                "matchIndex": 0 if has_candidates else None,
                "reason": "Closest wording among the candidates." if has_candidates else "No candidates.",
            })

        if purpose == "answer_question":
            rows = re.search(r"Rows:\s*(\d+)", user_msg)
            count = rows.group(1) if rows else "0"
            return json.dumps({
                "analysis": f"Based on {count} matching record(s), there is not enough signal "
                            "for a detailed answer in offline mode.",
            })

        return json.dumps({"response": "Analysis complete."})


# ── LLM Gateway (Main Interface) ─────────────────────────────────────────────

class LLMGateway:
    """
    Central gateway for all LLM calls.

    Usage:
        gw = LLMGateway()
        result = gw.chat(
            messages=[{"role": "user", "content": "Rephrase ..."}],
            purpose="rephrase",
        )
    """

    # Model → provider mapping
    PROVIDER_MAP = {
        "gemini-2.5-flash": "gemini",
        "gemini-2.5-pro": "gemini",
        "gemini-2.0-flash": "gemini",
        "local-stub": "local",
    }

    DEFAULT_CHAT_MODEL = "gemini-2.5-flash"

    def __init__(self, api_key: str | None = None, default_model: str | None = None,
                 retry_backoff: float = 1.0):
        self._providers: dict[str, LLMProvider] = {"local": LocalStubProvider()}
        self.default_model = default_model or os.getenv("LLM_DEFAULT_CHAT_MODEL", self.DEFAULT_CHAT_MODEL)
        self.retry_backoff = retry_backoff
        if api_key:
            self._providers["gemini"] = GeminiProvider(api_key)

    @classmethod
    def from_config(cls, config) -> "LLMGateway":
        return cls(
            api_key=config.get("GEMINI_API_KEY") or None,
            default_model=config.get("LLM_DEFAULT_CHAT_MODEL"),
            retry_backoff=0 if config.get("TESTING") else 1.0,
        )

    @property
    def provider_names(self) -> list[str]:
        return sorted(self._providers)

    def _get_provider(self, model: str) -> tuple[LLMProvider, str]:
        """
        Resolve model to provider. Falls back to local stub if real provider unavailable.
        Returns (provider, provider_name).
        """
        provider_name = self.PROVIDER_MAP.get(model, "local")
        if provider_name in self._providers:
            return self._providers[provider_name], provider_name

        logger.warning(
            "Provider '%s' not available (no API key?). Falling back to local stub for model '%s'.",
            provider_name, model,
        )
        return self._providers["local"], "local"

    def chat(self, messages: list, model: str | None = None, *, purpose: str = "",
             max_retries: int = 3, **kwargs) -> dict:
        """
        Send a chat completion request with retry.

        Args:
            messages: Chat messages.
            model: Model identifier (defaults to the configured chat model).
            purpose: What the call is for (e.g. "suggest_title"); logged and
                     used by the local stub to pick a response shape.
            max_retries: Attempts before giving up.
            **kwargs: temperature, max_tokens, json_output passed to provider.

        Returns:
            dict: {content, prompt_tokens, completion_tokens, model, latency_ms, provider}

        Raises:
            UpstreamError: every attempt failed.
        """
        model = model or self.default_model
        provider, provider_name = self._get_provider(model)

        last_error = None
        for attempt in range(1, max_retries + 1):
            start = time.perf_counter()
            try:
                result = provider.chat(messages, model, purpose=purpose, **kwargs)
            except Exception as exc:  # provider SDKs raise their own hierarchies
                last_error = exc
                logger.warning("LLM call attempt %d/%d failed (%s): %s",
                               attempt, max_retries, purpose or "chat", exc)
                if attempt < max_retries and self.retry_backoff:
                    time.sleep(min(self.retry_backoff * 2 ** (attempt - 1), 4))
                continue

            result["latency_ms"] = int((time.perf_counter() - start) * 1000)
            result["provider"] = provider_name
            logger.info("LLM %s via %s/%s: %d+%d tokens in %dms",
                        purpose or "chat", provider_name, result["model"],
                        result["prompt_tokens"], result["completion_tokens"], result["latency_ms"])
            return result

        raise UpstreamError("llm_chat", f"LLM call failed after {max_retries} attempts: {last_error}")
