"""Questionnaire control state with persistence and turn context tracking."""

from __future__ import annotations

import copy
import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Answer:
    """The recorded answer to one question."""

    choice_id: str
    at_risk_of_misunderstanding: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "choiceId": self.choice_id,
            "atRiskOfMisunderstanding": self.at_risk_of_misunderstanding,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Answer:
        return cls(
            choice_id=data["choiceId"],
            at_risk_of_misunderstanding=data.get("atRiskOfMisunderstanding", False),
        )


@dataclass(slots=True)
class AnswerStore:
    """Answers keyed by question id. Re-answering overwrites."""

    entries: dict[str, Answer] = field(default_factory=dict)

    def record(self, question_id: str, answer: Answer) -> Answer | None:
        """Write or overwrite an answer, returning the previous one."""
        previous = self.entries.get(question_id)
        self.entries[question_id] = answer
        return previous

    def get(self, question_id: str | None) -> Answer | None:
        if question_id is None:
            return None
        return self.entries.get(question_id)

    def remove(self, question_id: str) -> Answer | None:
        return self.entries.pop(question_id, None)

    def clear(self) -> None:
        self.entries.clear()

    def is_empty(self) -> bool:
        return not self.entries

    def answered_ids(self) -> set[str]:
        return set(self.entries)

    def snapshot(self) -> dict[str, Answer]:
        """Shallow copy safe to hand to collaborators (answers are immutable)."""
        return dict(self.entries)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {qid: answer.to_dict() for qid, answer in self.entries.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnswerStore:
        return cls(entries={qid: Answer.from_dict(raw) for qid, raw in data.items()})


@dataclass(slots=True)
class FocusState:
    """Which question is in focus and which initiative act is outstanding."""

    focus_question_id: str | None = None
    active_initiative_name: str | None = None

    def clear(self) -> None:
        self.focus_question_id = None
        self.active_initiative_name = None


@dataclass(slots=True)
class QuestionnaireState:
    """Serializable state owned by one questionnaire control instance."""

    answers: AnswerStore = field(default_factory=AnswerStore)
    focus: FocusState = field(default_factory=FocusState)

    @property
    def is_idle(self) -> bool:
        """No focus and no answers."""
        return self.answers.is_empty() and self.focus.focus_question_id is None

    def copy(self) -> QuestionnaireState:
        return copy.deepcopy(self)

    def clear(self) -> None:
        self.answers.clear()
        self.focus.clear()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for persistence."""
        return {
            "value": self.answers.to_dict(),
            "focusQuestionId": self.focus.focus_question_id,
            "activeInitiativeName": self.focus.active_initiative_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuestionnaireState:
        """Deserialize from dict."""
        return cls(
            answers=AnswerStore.from_dict(data.get("value", {})),
            focus=FocusState(
                focus_question_id=data.get("focusQuestionId"),
                active_initiative_name=data.get("activeInitiativeName"),
            ),
        )


@dataclass(slots=True)
class TurnContext:
    """Per-turn context handed to configuration hooks."""

    turn_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    attributes: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)
