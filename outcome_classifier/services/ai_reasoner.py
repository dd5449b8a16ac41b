"""AI reasoning service that asks an LLM to name a workflow's business outcome."""

import json
import logging
import os
from collections.abc import Mapping
from typing import Any

from langchain_core.exceptions import OutputParserException
from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, Field

from ..config import MAX_RETRIES, MODEL_CONFIG
from ..exceptions import AIResponseMalformedError, ExternalServiceUnavailableError

logger = logging.getLogger(__name__)


class AIClassification(BaseModel):
    """Schema the model is asked to fill in."""

    metric_key: str = Field(description="One of the allowed metric keys, or unknown")
    confidence: float = Field(description="Confidence score between 0 and 1")
    reasoning: str = Field(description="Single sentence explaining the classification")


class OutcomeReasoner:
    """Wraps a chat model behind a complete(system_prompt, payload) call."""

    def __init__(
        self,
        model: str = str(MODEL_CONFIG["classification_model"]),
        temperature: float = float(MODEL_CONFIG["temperature"]),
        timeout: float = float(MODEL_CONFIG["timeout"]),
        max_retries: int = MAX_RETRIES,
        llm: BaseChatModel | None = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.max_retries = max_retries
        self._llm = llm

    def _get_llm(self) -> BaseChatModel:
        if self._llm is not None:
            return self._llm
        if not os.getenv("OPENAI_API_KEY"):
            raise ExternalServiceUnavailableError("OPENAI_API_KEY environment variable not set")

        # Initialize the model with JSON mode
        self._llm = ChatOpenAI(
            model=self.model,
            temperature=self.temperature,
            timeout=self.timeout,
            max_retries=self.max_retries,
            max_tokens=int(MODEL_CONFIG["max_tokens"]),
            model_kwargs={"response_format": {"type": "json_object"}},
        )
        return self._llm

    def complete(self, system_prompt: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Ask the model to classify a workflow execution.

        Args:
            system_prompt: Instructions including the allowed metric keys
            payload: Execution data to classify, sent as JSON

        Returns:
            The parsed JSON object; its contents are untrusted

        Raises:
            ExternalServiceUnavailableError: If the model cannot be reached
            AIResponseMalformedError: If the response is not a JSON object

        """
        llm = self._get_llm()

        # The system prompt goes in as a variable so its JSON braces are not
        # read as template placeholders
        prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{system_prompt}"),
                (
                    "user",
                    """Analyze this workflow execution:

            {payload}

            Classify it and extract the outcome based on the system instructions.""",
                ),
            ]
        )
        parser = JsonOutputParser(pydantic_object=AIClassification)
        chain = prompt | llm | parser

        try:
            result = chain.invoke({
                "system_prompt": system_prompt,
                "payload": json.dumps(dict(payload), ensure_ascii=False, indent=2, default=str),
            })
        except OutputParserException as e:
            raise AIResponseMalformedError(f"AI response was not valid JSON: {e!s}") from e
        except Exception as e:
            logger.error(f"AI classification call failed: {e!s}")
            raise ExternalServiceUnavailableError(f"AI service failed: {e!s}") from e

        if not isinstance(result, dict):
            raise AIResponseMalformedError(
                f"AI response was {type(result).__name__}, expected a JSON object"
            )

        logger.debug(f"AI response: {result}")
        return result
