"""
RiskWise — Risk & Issue Dashboard
AI Assistants package.

Assistants:
    - risk_assistant: form helpers (rephrase, title, category, mitigations,
      duplicate detection) and the data analyst question answering
"""

from app.ai.assistants.risk_assistant import RiskAssistant

__all__ = ["RiskAssistant"]
