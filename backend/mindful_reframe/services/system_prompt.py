"""Reframing System Prompt — persona, method guidance and reply contract for the model.

Invariants:
    - build_reframe_bundle is pure: same session + text + rules → same bundle
    - Message list strictly alternates user/assistant and ends with the current user text
    - The JSON reply contract names exactly the keys ReframeCompletionPayload reads
    - Method guidance comes from the closed METHOD_GUIDANCE table (no string dispatch)

Design Decisions:
    - XML tags around each section: reliable separation of persona, thought, method
      and user background for the model
    - Exchange progress stated explicitly: on the final exchange the model is told to
      conclude, so forced completion usually has a real reframe to use
"""

from mindful_reframe.core.journal_analysis import COGNITIVE_DISTORTIONS
from mindful_reframe.core.method_guidance import get_guidance
from mindful_reframe.core.model_output import PromptBundle
from mindful_reframe.core.reframe_rules import ReframeRules
from mindful_reframe.core.reframing_session import ReframingSession
from mindful_reframe.core.user_context import IntakeProfile


_REPLY_CONTRACT = """\
Respond ONLY with a JSON object in this exact shape:
{
  "message": "your next reply to the user (2-4 sentences, end with one gentle question unless concluding)",
  "isComplete": false,
  "finalReframedThought": "the user's balanced, reframed version of the thought, or null",
  "nextSuggestion": "optional short hint for what to explore next, or null"
}
Set "isComplete" to true only when the user has arrived at a reframed thought they
can believe, and always include "finalReframedThought" when you do."""


def build_persona_directive(rules: ReframeRules) -> str:
    """Fixed persona + tone block shared by every model call."""
    persona = rules.persona
    preferred = "\n".join(f"- {t}" for t in rules.preferred_tone)
    prohibited = "\n".join(f"- {p}" for p in rules.prohibited_phrases)
    return (
        f"You are {persona.name}, an AI assistant with {persona.voice} "
        f"qualities and {persona.energy}.\n"
        f"Your approach is to {persona.approach}.\n\n"
        f"Use these tone guidelines:\n{preferred}\n\n"
        f"Never use these prohibited phrases:\n{prohibited}\n\n"
        "Remember: Guide through questions, not directive advice. Be supportive, "
        "curious, and growth-oriented. You are not a therapist and never give "
        "clinical advice or diagnoses."
    )


def _exchange_progress(session: ReframingSession) -> str:
    current = session.turn_count + 1
    total = session.max_user_turns
    if current >= total:
        return (
            f"This is exchange {current} of {total}, the final one. Conclude "
            'warmly: set "isComplete" to true and give the best '
            '"finalReframedThought" the user has reached so far.'
        )
    return f"This is exchange {current} of {total}."


def build_reframe_system_prompt(
    session: ReframingSession,
    rules: ReframeRules,
    user_context: IntakeProfile | None = None,
) -> str:
    guidance = get_guidance(session.method)
    sections = [
        f"<persona>\n{build_persona_directive(rules)}\n</persona>",
        (
            "<thought>\n"
            f"Thought being reframed: \"{session.selected_thought}\"\n"
            f"Cognitive distortion: {session.distortion_type}\n"
            "</thought>"
        ),
        (
            f"<method name=\"{guidance.title}\">\n"
            f"{guidance.guidance}\n"
            f"Starting question: {guidance.opening_question}\n"
            "</method>"
        ),
    ]
    if user_context is not None:
        sections.append(
            f"<user_background>\n{user_context.as_prompt_section()}\n</user_background>",
        )
    sections.append(f"<progress>\n{_exchange_progress(session)}\n</progress>")
    sections.append(f"<reply_format>\n{_REPLY_CONTRACT}\n</reply_format>")
    return "\n\n".join(sections)


def build_reframe_bundle(
    session: ReframingSession,
    user_text: str,
    rules: ReframeRules,
    *,
    user_context: IntakeProfile | None = None,
    max_tokens: int = 600,
) -> PromptBundle:
    """Prompt bundle for one reframing exchange."""
    messages = [
        {"role": turn.role.value, "content": turn.text}
        for turn in session.history
    ]
    messages.append({"role": "user", "content": user_text})
    return PromptBundle(
        system=build_reframe_system_prompt(session, rules, user_context),
        messages=messages,
        max_tokens=max_tokens,
    )


# ─── Journal analysis ────────────────────────────────────────────

_ANALYSIS_CONTRACT = """\
Please respond with JSON in this exact format:
{
  "summary": "A supportive 1-2 sentence summary of the journal entry",
  "detectedThoughts": [
    {
      "thought": "The specific negative thought or belief",
      "distortion": "The cognitive distortion name",
      "explanation": "A gentle, supportive explanation of how this distortion works"
    }
  ]
}"""


def build_analysis_bundle(
    entry: str,
    rules: ReframeRules,
    *,
    user_context: IntakeProfile | None = None,
    max_tokens: int = 1500,
) -> PromptBundle:
    """Prompt bundle asking the model to find distorted thoughts in an entry."""
    distortions = "\n".join(
        f"- {name}: {meaning}" for name, meaning in COGNITIVE_DISTORTIONS.items()
    )
    background = (
        f"<user_background>\n{user_context.as_prompt_section()}\n</user_background>\n\n"
        if user_context is not None else ""
    )
    system = (
        f"<persona>\n{build_persona_directive(rules)}\n</persona>\n\n"
        "Identify negative thought patterns and cognitive distortions in the "
        "user's journal entry.\n\n"
        f"<distortions>\n{distortions}\n</distortions>\n\n"
        "<guidelines>\n"
        "- Identify 2-4 most significant negative thoughts\n"
        "- Use supportive, non-judgmental language\n"
        "- Focus on thoughts that could genuinely benefit from reframing\n"
        "- If no clear distortions exist, identify subtler patterns of negative thinking\n"
        "</guidelines>\n\n"
        f"{background}"
        f"<reply_format>\n{_ANALYSIS_CONTRACT}\n</reply_format>"
    )
    return PromptBundle(
        system=system,
        messages=[{"role": "user", "content": f"Journal Entry:\n\"{entry}\""}],
        max_tokens=max_tokens,
    )
