"""Confirmation sub-dialog policy."""

from __future__ import annotations

import logging

from .acts import ConfirmAnswerAct
from .focus import FocusTracker
from .handlers.base import TurnFrame
from .state import Answer

logger = logging.getLogger(__name__)


class ConfirmationPolicy:
    """Decides whether a freshly recorded answer must be confirmed first."""

    def __init__(self, focus: FocusTracker) -> None:
        self._focus = focus

    @property
    def focus(self) -> FocusTracker:
        return self._focus

    def requires_confirmation(self, frame: TurnFrame, answer: Answer) -> bool:
        return answer.at_risk_of_misunderstanding and frame.is_confirmation_required()

    def request_confirmation(self, frame: TurnFrame, question_id: str, answer: Answer) -> None:
        """Emit the confirmation request as the turn's initiative act."""
        logger.info(f"{frame.control_id}: requesting confirmation of '{answer.choice_id}' for '{question_id}'")
        self._focus.focus_on(frame.state, question_id)
        frame.add_initiative_act(
            ConfirmAnswerAct(
                control_id=frame.control_id,
                question_id=question_id,
                choice_id=answer.choice_id,
            )
        )
