"""Answer recording and questionnaire completion evaluation."""

from __future__ import annotations

import logging

from .config_types import CompletionResult
from .confirmation import ConfirmationPolicy
from .errors import UnknownChoiceReferenceError
from .handlers.base import TurnFrame
from .state import Answer

logger = logging.getLogger(__name__)


def record_answer(
    frame: TurnFrame,
    question_id: str,
    choice_id: str,
    *,
    at_risk: bool,
    policy: ConfirmationPolicy,
) -> Answer:
    """Record an answer and insert a confirmation request when the policy demands it.

    When no confirmation is requested nothing is emitted; the controller's
    initiative step decides what happens next.

    Raises:
        UnknownQuestionReferenceError: If ``question_id`` is not in the turn's model
        UnknownChoiceReferenceError: If ``choice_id`` is not in the turn's model
    """
    frame.model.require_question(question_id)
    if not frame.model.has_choice(choice_id):
        raise UnknownChoiceReferenceError(choice_id, frame.model.choice_ids)

    answer = Answer(choice_id=choice_id, at_risk_of_misunderstanding=at_risk)
    previous = frame.state.answers.record(question_id, answer)
    if previous is None:
        logger.info(f"{frame.control_id}: '{question_id}' answered '{choice_id}' (at_risk={at_risk})")
    else:
        logger.info(
            f"{frame.control_id}: '{question_id}' re-answered '{previous.choice_id}' -> '{choice_id}' "
            f"(at_risk={at_risk})"
        )

    if policy.requires_confirmation(frame, answer):
        policy.request_confirmation(frame, question_id, answer)
    elif frame.state.focus.focus_question_id == question_id:
        # The outstanding ask for this question has been answered
        policy.focus.release_initiative(frame.state)
    return answer


def evaluate_completion(frame: TurnFrame) -> CompletionResult:
    """Run the completion functions in order; the first failure wins."""
    for completion_fn in frame.config.completion:
        result = completion_fn(frame.state, frame.context)
        if result is not True:
            logger.debug(f"{frame.control_id}: completion check failed. Reason: {result!r}")
            return result
    return True
