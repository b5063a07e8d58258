"""Journal Analyzer — finds distorted thoughts in a journal entry via the model.

Invariants:
    - Crisis text short-circuits: crisis response as summary, no detected thoughts,
      no model call
    - Entry is sanitized before it reaches the prompt
    - Unparseable or invalid model output raises ModelAdapterError (no silent empty result)
"""

import logging

from pydantic import ValidationError

from mindful_reframe.core.errors import ModelAdapterError
from mindful_reframe.core.journal_analysis import DetectedThought, JournalAnalysis
from mindful_reframe.core.model_output import extract_json_object
from mindful_reframe.core.reframe_rules import ReframeRules
from mindful_reframe.core.safety_screen import is_crisis, sanitize
from mindful_reframe.core.user_context import IntakeProfile
from mindful_reframe.infrastructure.anthropic_client import ResilientAnthropicClient
from mindful_reframe.infrastructure.model_adapter import response_text
from mindful_reframe.schemas.model_output import JournalAnalysisPayload
from mindful_reframe.services.system_prompt import build_analysis_bundle

logger = logging.getLogger(__name__)


class JournalAnalyzer:
    def __init__(
        self,
        client: ResilientAnthropicClient,
        model: str,
        rules: ReframeRules,
        max_tokens: int = 1500,
    ):
        self.client = client
        self.model = model
        self.rules = rules
        self.max_tokens = max_tokens

    async def analyze(
        self, entry: str, intake: IntakeProfile | None = None,
    ) -> JournalAnalysis:
        if is_crisis(entry, self.rules):
            logger.warning("Crisis indicators in journal entry, skipping analysis")
            return JournalAnalysis(
                summary=self.rules.crisis_response, crisis_detected=True,
            )

        bundle = build_analysis_bundle(
            sanitize(entry, self.rules), self.rules,
            user_context=intake, max_tokens=self.max_tokens,
        )
        response = await self.client.create_message(
            model=self.model,
            max_tokens=bundle.max_tokens,
            system=bundle.system,
            messages=bundle.messages,
            temperature=0.3,
        )
        data = extract_json_object(response_text(response))
        if data is None:
            raise ModelAdapterError(
                "Journal analysis was not a JSON object", "unparseable",
            )
        try:
            payload = JournalAnalysisPayload.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "Journal analysis failed validation (%d errors)", e.error_count(),
            )
            raise ModelAdapterError(
                "Journal analysis failed validation", "invalid_output",
            )
        return JournalAnalysis(
            summary=payload.summary.strip(),
            detected_thoughts=[
                DetectedThought(
                    thought=t.thought.strip(),
                    distortion=t.distortion.strip(),
                    explanation=t.explanation.strip(),
                )
                for t in payload.detected_thoughts
            ],
        )
