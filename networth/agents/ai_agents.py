"""
AI Agents for Net Worth Dashboard

DESIGN DECISION: The advisor is a pair of structured prompt flows
around a Gemini model:
1. Each flow has a typed input (plain strings) and a typed output
   (Pydantic model)
2. The model is asked for a JSON object, which is parsed and validated
3. Failures degrade to a plain fallback message instead of raising

CRITICAL BOUNDARIES:

1. SUMMARY FLOW:
   - CAN: Summarize the supplied accounts in the light of a goal
   - CANNOT: Invent accounts, balances or holdings not in the data

2. INVESTMENT ADVICE FLOW:
   - CAN: Give advice tailored to the data, risk tolerance and goals
   - MUST: Include a disclaimer that this is not financial advice
   - CANNOT: Make assumptions about data that is not provided

The only input the core supplies is `financial_data`: the faithful JSON
projection of the account collection (networth.accounts.to_financial_data).
"""

import json
from typing import Any, Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from networth.config import GeminiSettings, get_settings


DEFAULT_DISCLAIMER = (
    "This information is for educational purposes only and should not be "
    "considered financial advice. Consult a qualified professional before "
    "making investment decisions."
)

SUMMARY_FALLBACK = "I couldn't summarize your financial data right now. Please try again."
ADVICE_FALLBACK = "I couldn't generate investment advice right now. Please try again."


class AgentResponseError(Exception):
    """The model's reply could not be turned into the expected output."""
    pass


class FinancialSummary(BaseModel):
    """Output of the summary flow."""

    summary: str = Field(
        description="Summary of the user's financial data in the context of their goal"
    )


class InvestmentAdvice(BaseModel):
    """Output of the investment advice flow."""

    advice: str = Field(
        description="Personalized advice based on data, risk tolerance and goals"
    )
    disclaimer: str = Field(
        default=DEFAULT_DISCLAIMER,
        description="States that the advice is informational only"
    )


def parse_json_reply(text: str) -> dict[str, Any]:
    """
    Extract the first JSON object from a model reply.

    Models often wrap JSON in prose or code fences, so everything
    outside the outermost braces is ignored.

    Raises:
        AgentResponseError: No JSON object could be found
    """
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise AgentResponseError("Reply contains no JSON object")
    try:
        data = json.loads(text[start:end])
    except ValueError as e:
        raise AgentResponseError(f"Reply JSON is malformed: {e}") from e
    if not isinstance(data, dict):
        raise AgentResponseError("Reply JSON is not an object")
    return data


class FinancialAdvisorAgent:
    """
    AI agent behind the assistant's summary and advice features.

    RESPONSIBILITIES:
    - Render the prompt templates
    - Parse the structured reply
    - Fall back to a plain message when the model fails

    BOUNDARIES:
    - NEVER mutates accounts
    - ONLY sees the data it is given
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Any = None,
    ):
        """
        Args:
            settings: Gemini settings. Defaults to the cached settings.
            model: A ready model exposing `generate_content_async`
                   (injected in tests). Built from settings if omitted.
        """
        self._logger = structlog.get_logger()
        if model is not None:
            self._model = model
        else:
            self._settings = settings or get_settings().gemini
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    async def _ask(self, prompt: str) -> dict[str, Any]:
        response = await self._model.generate_content_async(prompt)
        return parse_json_reply(response.text.strip())

    async def summarize(
        self,
        financial_data: str,
        goal: str,
        user_prompt: str,
    ) -> FinancialSummary:
        """
        Summarize the user's accounts in the context of a financial goal.

        Args:
            financial_data: JSON array of the user's accounts
            goal: e.g. "retirement", "buying a house"
            user_prompt: What the user asked
        """
        prompt = f"""You are a financial advisor. You are provided with the user's financial data and their financial goal. Your job is to summarize the user's financial data in the context of their goal, also considering the prompt the user provided.

Financial Data: {financial_data}
Goal: {goal}
User Prompt: {user_prompt}

Only use the accounts and numbers present in the financial data.

Respond with ONLY a JSON object in this exact format:
{{"summary": "your summary"}}"""

        try:
            data = await self._ask(prompt)
            return FinancialSummary(**data)
        except (AgentResponseError, PydanticValidationError) as e:
            self._logger.warning("summary_reply_unusable", error=str(e))
        except Exception as e:
            # Transport and quota errors from the Gemini client
            self._logger.error("summary_generation_failed", error=str(e))

        return FinancialSummary(summary=SUMMARY_FALLBACK)

    async def investment_advice(
        self,
        financial_data: str,
        risk_tolerance: str,
        investment_goals: str,
        user_prompt: str,
    ) -> InvestmentAdvice:
        """
        Personalized investment advice.

        The disclaimer is always present: when the model omits it the
        default one is used.
        """
        prompt = f"""You are a financial advisor providing personalized investment advice to users based on their financial data, risk tolerance, and investment goals.

Here is the user's financial data:
{financial_data}

Here is the user's risk tolerance:
{risk_tolerance}

Here are the user's investment goals:
{investment_goals}

Here is the user's prompt:
{user_prompt}

Based on this information, provide personalized investment advice to the user. Include a disclaimer that the advice is for informational purposes only and should not be considered financial advice.
Be specific and tailor your advice to the data provided. Provide at least 3 sentences of useful advice.
Do not make assumptions about the data that is not explicitly provided.

Respond with ONLY a JSON object in this exact format:
{{"advice": "your advice", "disclaimer": "your disclaimer"}}"""

        try:
            data = await self._ask(prompt)
            if not data.get("disclaimer"):
                data.pop("disclaimer", None)
            return InvestmentAdvice(**data)
        except (AgentResponseError, PydanticValidationError) as e:
            self._logger.warning("advice_reply_unusable", error=str(e))
        except Exception as e:
            self._logger.error("advice_generation_failed", error=str(e))

        return InvestmentAdvice(advice=ADVICE_FALLBACK)
