"""Method Guidance — closed ReframingMethod → template table.

Invariants:
    - Every ReframingMethod member has exactly one MethodGuidance entry
    - Lookup is by enum member, never by raw string (raw strings are parsed once,
      in parse_method, which raises InvalidMethodError)

Design Decisions:
    - Table keyed by enum over string-keyed dispatch: an unknown method cannot reach
      prompt construction (ADR: make invalid states unrepresentable)
"""

from dataclasses import dataclass

from mindful_reframe.core.domain_types import ReframingMethod
from mindful_reframe.core.errors import InvalidMethodError

_THOUGHT_EXCERPT_CHARS = 80


@dataclass(frozen=True)
class MethodGuidance:
    title: str
    description: str
    guidance: str
    opening_question: str


METHOD_GUIDANCE: dict[ReframingMethod, MethodGuidance] = {
    ReframingMethod.EVIDENCE_CHECK: MethodGuidance(
        title="Evidence Check",
        description="Look for facts that support or contradict this thought",
        guidance=(
            "Help the user examine the evidence like a curious detective. Ask "
            "which specific facts or experiences support the thought and which "
            "contradict it. Separate observable facts from interpretations and "
            "feelings. Gently surface evidence the user may be filtering out."
        ),
        opening_question=(
            "What specific facts or experiences support this thought? "
            "What evidence might contradict it?"
        ),
    ),
    ReframingMethod.ALTERNATIVE_PERSPECTIVES: MethodGuidance(
        title="Alternative Perspectives",
        description="Consider other ways to view this situation",
        guidance=(
            "Invite the user to step outside their own viewpoint. Ask how a "
            "trusted friend, a neutral observer, or their future self might see "
            "the situation, and what other explanations could fit the same "
            "events. Collect several possibilities before weighing them."
        ),
        opening_question=(
            "How might someone else see this situation? "
            "What are other possible explanations?"
        ),
    ),
    ReframingMethod.BALANCED_THINKING: MethodGuidance(
        title="Balanced Thinking",
        description="Find a more nuanced, realistic perspective",
        guidance=(
            "Guide the user away from extremes toward a middle ground that is "
            "both realistic and hopeful. Acknowledge what is genuinely hard, "
            "name what is still okay or within reach, and help them phrase a "
            "statement that holds both."
        ),
        opening_question=(
            "What's both realistic and hopeful about this situation? "
            "Where's the middle ground?"
        ),
    ),
    ReframingMethod.SELF_COMPASSION: MethodGuidance(
        title="Self-Compassion",
        description="How would you speak to a good friend?",
        guidance=(
            "Help the user respond to themselves with the warmth they would "
            "offer a dear friend. Normalize the struggle as part of shared "
            "human experience, soften harsh self-talk, and look for a kinder "
            "sentence they could say to themselves."
        ),
        opening_question=(
            "What would you tell a dear friend who shared this exact worry? "
            "How can you show yourself the same compassion?"
        ),
    ),
    ReframingMethod.ACTION_ORIENTED: MethodGuidance(
        title="Action Focus",
        description="What can you actually control here?",
        guidance=(
            "Help the user sort the situation into what is within their "
            "influence and what is not. Explore one or two small, concrete "
            "steps they could take, and frame the reframed thought around "
            "agency rather than certainty."
        ),
        opening_question=(
            "What specific actions could you take? "
            "What parts of this situation are within your influence?"
        ),
    ),
}


def parse_method(raw: str | ReframingMethod) -> ReframingMethod:
    """Parse a wire value into a ReframingMethod or raise InvalidMethodError."""
    if isinstance(raw, ReframingMethod):
        return raw
    try:
        return ReframingMethod(raw)
    except ValueError:
        raise InvalidMethodError(str(raw))


def get_guidance(method: ReframingMethod) -> MethodGuidance:
    return METHOD_GUIDANCE[method]


def build_starter_prompt(method: ReframingMethod, thought: str) -> str:
    """Templated opener shown before the first user message (no model call)."""
    excerpt = thought[:_THOUGHT_EXCERPT_CHARS]
    if len(thought) > _THOUGHT_EXCERPT_CHARS:
        excerpt += "..."
    guidance = METHOD_GUIDANCE[method]
    return f'{guidance.title}: "{excerpt}"\n\n{guidance.opening_question}'
