from __future__ import annotations

from collections.abc import Collection

from .constants import ACT_ASK_QUESTION, ACT_CONFIRM_ANSWER
from .handlers.base import TurnFrame
from .ir import ExplicitChoiceEvent, GeneralReferenceEvent, LaunchEvent, Question


def tag_matches_or_absent(tag: str | None, allowed: Collection[str]) -> bool:
    """An absent qualifier always matches."""
    return tag is None or tag in allowed


def qualifiers_match(event: GeneralReferenceEvent | ExplicitChoiceEvent, question: Question) -> bool:
    return tag_matches_or_absent(event.action_tag, question.action_tags) and tag_matches_or_absent(
        event.target_tag, question.target_tags
    )


def is_launch(frame: TurnFrame) -> bool:
    return isinstance(frame.event, LaunchEvent)


def is_affirm(frame: TurnFrame) -> bool:
    return isinstance(frame.event, GeneralReferenceEvent) and frame.event.is_affirm


def is_deny(frame: TurnFrame) -> bool:
    return isinstance(frame.event, GeneralReferenceEvent) and frame.event.is_deny


def has_focus(frame: TurnFrame) -> bool:
    return frame.state.focus.focus_question_id is not None


def asking_question(frame: TurnFrame) -> bool:
    """A bare yes/no is only interpretable while a question is being asked."""
    return frame.state.focus.active_initiative_name == ACT_ASK_QUESTION


def confirming_answer(frame: TurnFrame) -> bool:
    return frame.state.focus.active_initiative_name == ACT_CONFIRM_ANSWER


def focused_question(frame: TurnFrame) -> Question | None:
    """The focused question, or None when nothing (known) is in focus."""
    return frame.model.question_by_id(frame.state.focus.focus_question_id)


def focused_question_answered(frame: TurnFrame) -> bool:
    return frame.state.focus.focus_question_id in frame.state.answers
