"""System acts emitted by controls.

Acts carry business data only. Rendering collaborators turn them into prompt
text and visuals without consulting the control again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from .constants import (
    ACT_ANSWER_CONFIRMED,
    ACT_ANSWER_DISCONFIRMED,
    ACT_ASK_QUESTION,
    ACT_CONFIRM_ANSWER,
)
from .ir import QuestionnaireModel
from .state import Answer


@dataclass(frozen=True, slots=True)
class SystemAct:
    """Base class for every act a control can emit."""

    name: ClassVar[str] = "SystemAct"
    is_initiative: ClassVar[bool] = False

    control_id: str

    def payload(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "controlId": self.control_id,
            "initiative": self.is_initiative,
            "payload": self.payload(),
        }


@dataclass(frozen=True, slots=True)
class InitiativeAct(SystemAct):
    """A proactive act that drives the conversation forward."""

    is_initiative: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class AskQuestionAct(InitiativeAct):
    """Present the questionnaire and ask one question."""

    name: ClassVar[str] = ACT_ASK_QUESTION

    questionnaire: QuestionnaireModel = field(default_factory=QuestionnaireModel)
    answers: dict[str, Answer] = field(default_factory=dict)
    question_id: str = ""

    def payload(self) -> dict[str, Any]:
        return {
            "questionnaire": self.questionnaire.model_dump(by_alias=True, mode="json"),
            "answers": {qid: a.to_dict() for qid, a in self.answers.items()},
            "questionId": self.question_id,
        }


@dataclass(frozen=True, slots=True)
class ConfirmAnswerAct(InitiativeAct):
    """Ask the user to confirm an answer that is at risk of misunderstanding."""

    name: ClassVar[str] = ACT_CONFIRM_ANSWER

    question_id: str = ""
    choice_id: str = ""

    def payload(self) -> dict[str, Any]:
        return {"questionId": self.question_id, "choiceId": self.choice_id}


@dataclass(frozen=True, slots=True)
class AnswerConfirmedAct(SystemAct):
    """Acknowledge that the user confirmed an answer."""

    name: ClassVar[str] = ACT_ANSWER_CONFIRMED

    question_id: str = ""
    choice_id: str = ""

    def payload(self) -> dict[str, Any]:
        return {"questionId": self.question_id, "choiceId": self.choice_id}


@dataclass(frozen=True, slots=True)
class AnswerDisconfirmedAct(SystemAct):
    """Acknowledge that the user rejected an answer."""

    name: ClassVar[str] = ACT_ANSWER_DISCONFIRMED

    question_id: str = ""
    choice_id: str = ""

    def payload(self) -> dict[str, Any]:
        return {"questionId": self.question_id, "choiceId": self.choice_id}
