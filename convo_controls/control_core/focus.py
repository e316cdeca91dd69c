"""Focus tracking and next-question selection."""

from __future__ import annotations

import logging

from .handlers.base import TurnFrame
from .ir import GeneralReferenceEvent, Question, QuestionnaireModel
from .state import AnswerStore, QuestionnaireState

logger = logging.getLogger(__name__)


class FocusTracker:
    """Determines which question an unqualified answer applies to.

    Selection policy: the earliest unanswered question in model order; when
    every question is answered, the first question.
    """

    def focused_question(self, frame: TurnFrame) -> Question | None:
        """Question currently in focus.

        Raises:
            UnknownQuestionReferenceError: If focus names a question the turn's
                model does not declare
        """
        focus_id = frame.state.focus.focus_question_id
        if focus_id is None:
            return None
        return frame.model.require_question(focus_id)

    def first_unanswered(self, model: QuestionnaireModel, answers: AnswerStore) -> Question | None:
        for question in model.questions:
            if question.id not in answers:
                return question
        return None

    def all_answered(self, model: QuestionnaireModel, answers: AnswerStore) -> bool:
        return self.first_unanswered(model, answers) is None

    def next_question(self, model: QuestionnaireModel, answers: AnswerStore) -> Question | None:
        """Question the next ask should target, or None for an empty questionnaire."""
        question = self.first_unanswered(model, answers)
        if question is None and model.questions:
            return model.questions[0]
        return question

    def referenced_question(self, model: QuestionnaireModel, event: GeneralReferenceEvent) -> Question | None:
        """The single question selected by the event's target tag, if any."""
        if event.target_tag is None:
            return None
        candidates = model.questions_tagged(event.target_tag)
        if len(candidates) != 1:
            return None
        return candidates[0]

    def focus_on(self, state: QuestionnaireState, question_id: str) -> None:
        logger.debug(f"Focus moved to question '{question_id}'")
        state.focus.focus_question_id = question_id

    def release_initiative(self, state: QuestionnaireState) -> None:
        """The outstanding initiative act has been dealt with; focus stays."""
        state.focus.active_initiative_name = None
