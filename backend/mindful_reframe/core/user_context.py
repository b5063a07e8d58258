"""User Context — intake answers rendered as optional prompt background."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IntakeProfile:
    personal_concerns: str
    responsibility_challenges: str
    ideal_life: str
    sources_of_joy: str
    core_values: str

    def as_prompt_section(self) -> str:
        return (
            "Context about the user from their intake:\n"
            f"- Personal concerns: {self.personal_concerns}\n"
            f"- Work/responsibility challenges: {self.responsibility_challenges}\n"
            f"- Ideal life vision: {self.ideal_life}\n"
            f"- Sources of joy: {self.sources_of_joy}\n"
            f"- Core values: {self.core_values}"
        )


INTAKE_FIELDS: tuple[str, ...] = (
    "personal_concerns", "responsibility_challenges", "ideal_life",
    "sources_of_joy", "core_values",
)


def profile_from_record(record) -> IntakeProfile | None:
    """Build a profile from any object exposing the intake fields."""
    if record is None:
        return None
    return IntakeProfile(**{name: getattr(record, name) for name in INTAKE_FIELDS})
