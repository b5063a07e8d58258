"""Fake Model Adapter — scripted ModelAdapter for controller, turn and route tests.

Invariants:
    - Each complete() call consumes one scripted item: ModelCompletion is returned,
      Exception is raised, float sleeps that many seconds first (timeout tests)
    - Unscripted calls return a default non-completing reply
    - Every PromptBundle received is recorded in .bundles
"""

import asyncio

from mindful_reframe.core.model_output import ModelCompletion, PromptBundle

DEFAULT_REPLY = ModelCompletion(
    message="That sounds heavy. What evidence do you notice for and against it?",
)


class FakeModelAdapter:
    def __init__(self, script=None):
        self.script = list(script or [])
        self.bundles: list[PromptBundle] = []

    def queue(self, *items) -> None:
        self.script.extend(items)

    async def complete(self, bundle: PromptBundle) -> ModelCompletion:
        self.bundles.append(bundle)
        item = self.script.pop(0) if self.script else DEFAULT_REPLY
        if isinstance(item, (int, float)):
            await asyncio.sleep(item)
            return DEFAULT_REPLY
        if isinstance(item, BaseException):
            raise item
        return item


def completing(reframe: str, message: str = "Beautifully put.") -> ModelCompletion:
    return ModelCompletion(
        message=message, is_complete=True, final_reframed_thought=reframe,
    )
