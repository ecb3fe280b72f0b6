"""
RiskWise — Risk & Issue Dashboard
AI module.

Submodules:
    - gateway: LLM Gateway (provider routing, retry, local stub)
    - prompt_registry: YAML prompt template loading
    - assistants: RiskAssistant
"""
