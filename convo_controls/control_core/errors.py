"""Error taxonomy for dialog controls."""

from __future__ import annotations

from dataclasses import dataclass


class ControlError(Exception):
    """Base exception for dialog control errors."""


class UnhandledInputError(ControlError):
    """Raised when no turn handler claims the input event.

    The parent manager is expected to offer the event to a sibling control or
    fall back to its own "didn't understand" behaviour.
    """

    def __init__(self, control_id: str, event_kind: str | None, turn_id: str | None = None) -> None:
        super().__init__(f"{control_id} can not handle event of kind '{event_kind}'")
        self.control_id = control_id
        self.event_kind = event_kind
        self.turn_id = turn_id


class InconsistentInvocationOrderError(ControlError):
    """Raised when an effect is applied without a matching guard resolution."""

    def __init__(self, message: str, turn_id: str | None = None) -> None:
        super().__init__(message)
        self.turn_id = turn_id


class UnknownQuestionReferenceError(ControlError):
    """Raised when an effect references a question absent from the model."""

    def __init__(self, question_id: str | None, known_ids: list[str] | None = None) -> None:
        super().__init__(f"Unknown question reference: {question_id!r}")
        self.question_id = question_id
        self.known_ids = known_ids or []


class UnknownChoiceReferenceError(ControlError):
    """Raised when an effect references a choice absent from the model."""

    def __init__(self, choice_id: str | None, known_ids: list[str] | None = None) -> None:
        super().__init__(f"Unknown choice reference: {choice_id!r}")
        self.choice_id = choice_id
        self.known_ids = known_ids or []


@dataclass(frozen=True, slots=True)
class AmbiguousMatch:
    """Diagnostic emitted when more than one guard claims the same decision point.

    This is never raised; the first match is used and the anomaly is reported
    so the handler configuration can be fixed.
    """

    control_id: str
    kind: str  # "turn" or "initiative"
    chosen: str
    matches: tuple[str, ...]
    turn_id: str | None = None

    def describe(self) -> str:
        """Human-readable summary for logs."""
        return (
            f"{self.control_id}: {len(self.matches)} {self.kind} handlers matched "
            f"({', '.join(self.matches)}); using '{self.chosen}'"
        )
