"""AI agents package."""

from networth.agents.ai_agents import (
    AgentResponseError,
    FinancialAdvisorAgent,
    FinancialSummary,
    InvestmentAdvice,
    parse_json_reply,
)

__all__ = [
    "AgentResponseError",
    "FinancialAdvisorAgent",
    "FinancialSummary",
    "InvestmentAdvice",
    "parse_json_reply",
]
