"""
RiskWise — Risk & Issue Dashboard
Prompt Registry.

YAML-based prompt template management with:
    - Built-in defaults for every assistant prompt
    - Overrides loaded from ai_knowledge/prompts/*.yaml
    - {{variable}} rendering
    - Version tracking

Usage:
    from app.ai.prompt_registry import PromptRegistry
    registry = PromptRegistry()
    messages = registry.render("suggest_title", description="Vendor may miss the Q3 delivery")
"""

import logging
import os
import re
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Default prompts directory
_PROMPTS_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "ai_knowledge", "prompts",
)


class PromptTemplate:
    """A single prompt template with metadata."""

    def __init__(self, name: str, version: str, system: str, user: str,
                 description: str = "", metadata: dict | None = None):
        self.name = name
        self.version = version
        self.system = system
        self.user = user
        self.description = description
        self.metadata = metadata or {}

    def render(self, **variables) -> list[dict]:
        """
        Render template with variables, returning chat messages.

        Returns:
            List of message dicts: [{"role": "system", "content": "..."}, ...]
        """
        system_rendered = self._substitute(self.system, variables)
        user_rendered = self._substitute(self.user, variables)

        messages = []
        if system_rendered.strip():
            messages.append({"role": "system", "content": system_rendered})
        if user_rendered.strip():
            messages.append({"role": "user", "content": user_rendered})
        return messages

    @staticmethod
    def _substitute(template: str, variables: dict) -> str:
        """Replace {{var}} placeholders; unknown placeholders are left as-is."""
        def replacer(match):
            key = match.group(1).strip()
            return str(variables.get(key, f"{{{{{key}}}}}"))
        return re.sub(r"\{\{(\s*\w+\s*)\}\}", replacer, template)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "system_preview": self.system[:200],
            "user_preview": self.user[:200],
        }


class PromptRegistry:
    """
    Registry for loading and managing prompt templates.

    Built-in defaults are registered first; a YAML file with the same
    name and version replaces the default.
    """

    def __init__(self, prompts_dir: str | None = None):
        self._prompts_dir = prompts_dir or _PROMPTS_DIR
        self._templates: dict[str, dict[str, PromptTemplate]] = {}  # name → {version → template}
        for tpl in _DEFAULT_TEMPLATES:
            self._register(tpl)
        self._load_from_dir()

    def _load_from_dir(self):
        prompts_path = Path(self._prompts_dir)
        if not prompts_path.exists():
            logger.info("Prompts directory not found: %s. Using defaults only.", self._prompts_dir)
            return

        for yaml_file in sorted(prompts_path.glob("*.yaml")):
            try:
                with open(yaml_file, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as exc:
                logger.error("Failed to load prompt %s: %s", yaml_file.name, exc)
                continue
            if not data or not isinstance(data, dict):
                continue

            tpl = PromptTemplate(
                name=data.get("name", yaml_file.stem),
                version=str(data.get("version", "v1")),
                system=data.get("system", ""),
                user=data.get("user", ""),
                description=data.get("description", ""),
                metadata=data.get("metadata", {}),
            )
            self._register(tpl)
            logger.debug("Loaded prompt template: %s (%s) from %s",
                         tpl.name, tpl.version, yaml_file.name)

    def _register(self, template: PromptTemplate):
        self._templates.setdefault(template.name, {})[template.version] = template

    def get(self, name: str, version: str = "v1") -> PromptTemplate | None:
        return self._templates.get(name, {}).get(version)

    def render(self, name: str, version: str = "v1", **variables) -> list[dict]:
        """
        Render a prompt template with variables.

        Raises:
            KeyError: If template not found.
        """
        tpl = self.get(name, version)
        if not tpl:
            raise KeyError(f"Prompt template not found: {name} {version}")
        return tpl.render(**variables)

    def list_templates(self) -> list[dict]:
        return [tpl.to_dict() for versions in self._templates.values() for tpl in versions.values()]


# ── Built-in Default Templates ────────────────────────────────────────────────

_JSON_ONLY = "Respond with a single JSON object and nothing else."

_DEFAULT_TEMPLATES = [
    PromptTemplate(
        name="rephrase",
        version="v1",
        description="Rewrite a risk/issue description clearly and professionally",
        system=(
            "You are an expert technical writer on a project risk register. "
            "Rephrase the user's description to be clearer, more concise and professionally worded "
            "without changing its meaning. " + _JSON_ONLY +
            ' Shape: {"rephrasedDescription": "..."}'
        ),
        user="Original Description: {{description}}",
    ),
    PromptTemplate(
        name="suggest_title",
        version="v1",
        description="Short title for a risk/issue description",
        system=(
            "You are an expert project manager who writes concise, descriptive titles. "
            "Suggest a title of no more than 10 words for the risk or issue. " + _JSON_ONLY +
            ' Shape: {"title": "..."}'
        ),
        user="Description: {{description}}",
    ),
    PromptTemplate(
        name="suggest_category",
        version="v1",
        description="Category / sub-category for an issue",
        system=(
            "You categorize project management issues. Choose the category from: "
            "{{categories}}. Add a concise, professional sub-category. " + _JSON_ONLY +
            ' Shape: {"category": "...", "subCategory": "..."}'
        ),
        user="Description: {{description}}",
    ),
    PromptTemplate(
        name="suggest_mitigations",
        version="v1",
        description="3-5 mitigation strategies for a risk or issue",
        system=(
            "You specialise in mitigation strategies for project risks and issues. "
            "Suggest 3 to 5 relevant, actionable strategies. " + _JSON_ONLY +
            ' Shape: {"suggestedMitigationStrategies": ["...", "..."]}'
        ),
        user="Context: {{context}}\nDescription: {{description}}",
    ),
    PromptTemplate(
        name="find_similar",
        version="v1",
        description="Pick the existing record that duplicates a new description",
        system=(
            "You help users avoid duplicate entries in a risk register. Given a new description "
            "and numbered candidate records, return the index of the candidate describing the same "
            "risk or issue, or null if none does. " + _JSON_ONLY +
            ' Shape: {"matchIndex": 0, "reason": "..."}'
        ),
        user="Candidates:\n{{candidates}}\n\nDescription: {{description}}",
    ),
    PromptTemplate(
        name="answer_question",
        version="v1",
        description="Answer a question over a filtered risk/issue dataset",
        system=(
            "You are a helpful data analyst. Answer the user's question using only the JSON data "
            "provided. Each row has 'type' (Risk or Issue), 'status', 'dueDate', 'projectName', "
            "'impactValue' and, for risks, 'probability', 'impactRating' and 'riskScore'. "
            "If the data cannot answer the question, say so. " + _JSON_ONLY +
            ' Shape: {"analysis": "..."}'
        ),
        user="Dataset: {{dataset}}\nRows: {{row_count}}\n```json\n{{context}}\n```\n\nQuestion: {{question}}",
    ),
]
