"""Built-in handlers for the questionnaire control.

Turn handlers, in resolution order:

- ``launch``: the session opened; nothing to react to, the initiative step
  decides whether to ask a question.
- ``direct_answer_implied``: a bare "yes" while a question is being asked
  records the implied choice for the focused question.
- ``direct_answer_explicit``: "often" / "headache: often" records the named
  choice.
- ``confirmation_affirmed`` / ``confirmation_disconfirmed``: yes/no while an
  answer is being confirmed.
- ``focus_question``: "go to headache" brings a question into focus and asks it.

Initiative handlers:

- ``ask_question``: ask the earliest unanswered question.
- ``confirm_answer``: repeat an outstanding confirmation request that the last
  turn left unresolved.

``implied_deny_handler`` is an opt-in extension for a bare "no"; add it through
``QuestionnaireControlConfig.custom_handlers``.
"""

from __future__ import annotations

import logging
from typing import Literal

from .acts import AnswerConfirmedAct, AnswerDisconfirmedAct, AskQuestionAct
from .answers import evaluate_completion, record_answer
from .confirmation import ConfirmationPolicy
from .constants import (
    HANDLER_CONFIRMATION_AFFIRMED,
    HANDLER_CONFIRMATION_DISCONFIRMED,
    HANDLER_DIRECT_ANSWER_EXPLICIT,
    HANDLER_DIRECT_ANSWER_IMPLIED,
    HANDLER_FOCUS_QUESTION,
    HANDLER_IMPLIED_DENY,
    HANDLER_LAUNCH,
    INITIATIVE_ASK_QUESTION,
    INITIATIVE_CONFIRM_ANSWER,
    POLARITY_AFFIRM,
    POLARITY_DENY,
)
from .errors import InconsistentInvocationOrderError
from .focus import FocusTracker
from .guards import (
    asking_question,
    confirming_answer,
    focused_question,
    focused_question_answered,
    has_focus,
    is_affirm,
    is_deny,
    is_launch,
    qualifiers_match,
    tag_matches_or_absent,
)
from .handlers.base import InitiativeHandler, TurnFrame, TurnHandler
from .ir import ExplicitChoiceEvent, GeneralReferenceEvent, Question
from .state import Answer

logger = logging.getLogger(__name__)


def implied_choice(frame: TurnFrame, polarity: Literal["affirm", "deny"]) -> str:
    """Choice a bare yes/no maps to: model, then configured default, then last choice."""
    model = frame.model
    if polarity == POLARITY_AFFIRM:
        choice_id = model.implied_choice_for_affirm or frame.config.implied_choice_for_affirm
    else:
        choice_id = model.implied_choice_for_deny or frame.config.implied_choice_for_deny
    return choice_id or model.choice_ids[-1]


def _out_of_sync(frame: TurnFrame, missing: str) -> InconsistentInvocationOrderError:
    message = f"{frame.control_id}: effect applied without {missing}. Are resolve/apply out of sync?"
    logger.error(message)
    return InconsistentInvocationOrderError(message, turn_id=frame.turn_id)


class QuestionnaireBuiltIns:
    """Factory for the standard questionnaire handlers."""

    def __init__(self, focus: FocusTracker, confirmation: ConfirmationPolicy) -> None:
        self._focus = focus
        self._confirmation = confirmation

    def turn_handlers(self) -> list[TurnHandler]:
        return [
            TurnHandler(HANDLER_LAUNCH, self._is_launch, self._handle_launch),
            TurnHandler(HANDLER_DIRECT_ANSWER_IMPLIED, self._is_implied_affirm, self._handle_implied_affirm),
            TurnHandler(HANDLER_DIRECT_ANSWER_EXPLICIT, self._is_explicit_answer, self._handle_explicit_answer),
            TurnHandler(HANDLER_CONFIRMATION_AFFIRMED, self._is_confirmation_affirmed, self._handle_confirmation_affirmed),
            TurnHandler(
                HANDLER_CONFIRMATION_DISCONFIRMED,
                self._is_confirmation_disconfirmed,
                self._handle_confirmation_disconfirmed,
            ),
            TurnHandler(HANDLER_FOCUS_QUESTION, self._is_focus_request, self._handle_focus_request),
        ]

    def initiative_handlers(self) -> list[InitiativeHandler]:
        return [
            InitiativeHandler(INITIATIVE_ASK_QUESTION, self._wants_to_ask, self._ask_next_question),
            InitiativeHandler(INITIATIVE_CONFIRM_ANSWER, self._wants_to_reconfirm, self._reconfirm),
        ]

    def implied_deny_handler(self) -> TurnHandler:
        """Handler mapping a bare "no" to the implied deny choice."""
        return TurnHandler(HANDLER_IMPLIED_DENY, self._is_implied_deny, self._handle_implied_deny)

    def _require_focused(self, frame: TurnFrame) -> Question:
        question = self._focus.focused_question(frame)
        if question is None:
            raise _out_of_sync(frame, "a focused question")
        return question

    # ------------------------------------------------------------------
    # Launch
    # ------------------------------------------------------------------

    def _is_launch(self, frame: TurnFrame) -> bool:
        return is_launch(frame)

    def _handle_launch(self, frame: TurnFrame) -> None:
        logger.debug(f"{frame.control_id}: launch received")

    # ------------------------------------------------------------------
    # Direct answers
    # ------------------------------------------------------------------

    def _bare_answer_applies(self, frame: TurnFrame) -> bool:
        event = frame.event
        if not isinstance(event, GeneralReferenceEvent):
            return False
        if not (has_focus(frame) and asking_question(frame)):
            return False
        question = focused_question(frame)
        # A stale focus surfaces as an error in the effect
        return question is None or qualifiers_match(event, question)

    def _is_implied_affirm(self, frame: TurnFrame) -> bool:
        return is_affirm(frame) and self._bare_answer_applies(frame)

    def _handle_implied_affirm(self, frame: TurnFrame) -> None:
        self._record_implied(frame, POLARITY_AFFIRM)

    def _is_implied_deny(self, frame: TurnFrame) -> bool:
        return is_deny(frame) and self._bare_answer_applies(frame)

    def _handle_implied_deny(self, frame: TurnFrame) -> None:
        self._record_implied(frame, POLARITY_DENY)

    def _record_implied(self, frame: TurnFrame, polarity: Literal["affirm", "deny"]) -> None:
        question = self._require_focused(frame)
        record_answer(
            frame,
            question.id,
            implied_choice(frame, polarity),
            at_risk=frame.config.implied_answer_at_risk,
            policy=self._confirmation,
        )

    def _explicit_target(self, frame: TurnFrame, event: ExplicitChoiceEvent) -> str | None:
        return event.question_ref or frame.state.focus.focus_question_id

    def _is_explicit_answer(self, frame: TurnFrame) -> bool:
        event = frame.event
        if not isinstance(event, ExplicitChoiceEvent):
            return False
        if not frame.model.has_choice(event.choice_id):
            return False
        question_id = self._explicit_target(frame, event)
        if question_id is None:
            return False
        question = frame.model.question_by_id(question_id)
        if question is None:
            # Unknown named question belongs to someone else; stale focus is an error
            return event.question_ref is None
        return qualifiers_match(event, question)

    def _handle_explicit_answer(self, frame: TurnFrame) -> None:
        event = frame.event
        if not isinstance(event, ExplicitChoiceEvent):
            raise _out_of_sync(frame, "an explicit choice event")
        question_id = self._explicit_target(frame, event)
        if question_id is None:
            raise _out_of_sync(frame, "a target question")
        record_answer(
            frame,
            question_id,
            event.choice_id,
            at_risk=event.low_confidence,
            policy=self._confirmation,
        )

    # ------------------------------------------------------------------
    # Confirmation sub-dialog
    # ------------------------------------------------------------------

    def _is_confirmation_reply(self, frame: TurnFrame) -> bool:
        event = frame.event
        if not isinstance(event, GeneralReferenceEvent):
            return False
        if not (confirming_answer(frame) and focused_question_answered(frame)):
            return False
        question = focused_question(frame)
        return question is None or qualifiers_match(event, question)

    def _is_confirmation_affirmed(self, frame: TurnFrame) -> bool:
        return is_affirm(frame) and self._is_confirmation_reply(frame)

    def _handle_confirmation_affirmed(self, frame: TurnFrame) -> None:
        question = self._require_focused(frame)
        answer = frame.state.answers.get(question.id)
        if answer is None:
            raise _out_of_sync(frame, f"an answer for '{question.id}'")
        frame.state.answers.record(question.id, Answer(choice_id=answer.choice_id))
        self._focus.release_initiative(frame.state)
        logger.info(f"{frame.control_id}: '{question.id}' confirmed as '{answer.choice_id}'")
        frame.add_act(
            AnswerConfirmedAct(control_id=frame.control_id, question_id=question.id, choice_id=answer.choice_id)
        )

    def _is_confirmation_disconfirmed(self, frame: TurnFrame) -> bool:
        return is_deny(frame) and self._is_confirmation_reply(frame)

    def _handle_confirmation_disconfirmed(self, frame: TurnFrame) -> None:
        question = self._require_focused(frame)
        answer = frame.state.answers.remove(question.id)
        if answer is None:
            raise _out_of_sync(frame, f"an answer for '{question.id}'")
        self._focus.release_initiative(frame.state)
        logger.info(f"{frame.control_id}: '{question.id}' answer '{answer.choice_id}' disconfirmed")
        frame.add_act(
            AnswerDisconfirmedAct(control_id=frame.control_id, question_id=question.id, choice_id=answer.choice_id)
        )
        self._ask(frame, question)

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def _referenced(self, frame: TurnFrame) -> Question | None:
        event = frame.event
        if not isinstance(event, GeneralReferenceEvent) or event.polarity is not None:
            return None
        question = self._focus.referenced_question(frame.model, event)
        if question is None or not tag_matches_or_absent(event.action_tag, question.action_tags):
            return None
        return question

    def _is_focus_request(self, frame: TurnFrame) -> bool:
        return self._referenced(frame) is not None

    def _handle_focus_request(self, frame: TurnFrame) -> None:
        question = self._referenced(frame)
        if question is None:
            raise _out_of_sync(frame, "a referenced question")
        self._ask(frame, question)

    # ------------------------------------------------------------------
    # Initiative
    # ------------------------------------------------------------------

    def _wants_to_reconfirm(self, frame: TurnFrame) -> bool:
        if not (confirming_answer(frame) and frame.is_confirmation_required()):
            return False
        answer = frame.state.answers.get(frame.state.focus.focus_question_id)
        return answer is not None and answer.at_risk_of_misunderstanding

    def _reconfirm(self, frame: TurnFrame) -> None:
        question = self._require_focused(frame)
        answer = frame.state.answers.get(question.id)
        if answer is None:
            raise _out_of_sync(frame, f"an answer for '{question.id}'")
        self._confirmation.request_confirmation(frame, question.id, answer)

    def _wants_to_ask(self, frame: TurnFrame) -> bool:
        if self._wants_to_reconfirm(frame):
            return False
        answers = frame.state.answers
        if answers.is_empty() and not frame.is_required():
            return False
        if not frame.model.questions:
            return False
        if self._focus.all_answered(frame.model, answers) and evaluate_completion(frame) is True:
            return False
        return True

    def _ask_next_question(self, frame: TurnFrame) -> None:
        question = self._focus.next_question(frame.model, frame.state.answers)
        if question is None:
            raise _out_of_sync(frame, "a question to ask")
        self._ask(frame, question)

    def _ask(self, frame: TurnFrame, question: Question) -> None:
        self._focus.focus_on(frame.state, question.id)
        frame.add_initiative_act(
            AskQuestionAct(
                control_id=frame.control_id,
                questionnaire=frame.model,
                answers=frame.state.answers.snapshot(),
                question_id=question.id,
            )
        )


def implied_deny_handler() -> TurnHandler:
    """Opt-in handler for a bare "no" while a question is being asked."""
    focus = FocusTracker()
    return QuestionnaireBuiltIns(focus, ConfirmationPolicy(focus)).implied_deny_handler()
