"""Anthropic Model Adapter — PromptBundle in, validated ModelCompletion out.

Invariants:
    - complete() either returns a ModelCompletion with a non-empty message or raises
      ModelAdapterError — it never returns partial / unvalidated data
    - Raw model text is never logged (it may quote the user's journal)

Design Decisions:
    - Adapter owns parsing + validation so the controller sees one failure type
      (ModelAdapterError) for transport errors and unparseable output alike
"""

import logging

from pydantic import ValidationError

from mindful_reframe.core.errors import ModelAdapterError, ErrorContext
from mindful_reframe.core.model_output import (
    ModelCompletion, PromptBundle, extract_json_object,
)
from mindful_reframe.infrastructure.anthropic_client import ResilientAnthropicClient
from mindful_reframe.schemas.model_output import ReframeCompletionPayload

logger = logging.getLogger(__name__)


def response_text(response) -> str:
    """Concatenate the text blocks of an Anthropic message."""
    return "".join(
        getattr(block, "text", "") for block in response.content
        if getattr(block, "type", None) == "text"
    )


class AnthropicModelAdapter:
    """ModelAdapter implementation backed by ResilientAnthropicClient."""

    def __init__(self, client: ResilientAnthropicClient, model: str):
        self.client = client
        self.model = model

    async def complete(
        self, bundle: PromptBundle, context: ErrorContext | None = None,
    ) -> ModelCompletion:
        response = await self.client.create_message(
            model=self.model,
            max_tokens=bundle.max_tokens,
            system=bundle.system,
            messages=bundle.messages,
            context=context,
        )
        data = extract_json_object(response_text(response))
        if data is None:
            raise ModelAdapterError(
                "Model reply was not a JSON object", "unparseable", context=context,
            )
        try:
            payload = ReframeCompletionPayload.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "Model reply failed validation (%d errors)", e.error_count(),
            )
            raise ModelAdapterError(
                "Model reply failed validation", "invalid_output", context=context,
            )
        return ModelCompletion(
            message=payload.message,
            is_complete=payload.is_complete,
            final_reframed_thought=payload.final_reframed_thought,
            next_suggestion=payload.next_suggestion,
        )
