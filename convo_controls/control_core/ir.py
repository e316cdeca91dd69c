from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel

from .constants import (
    DEFAULT_ACTION_TAGS,
    DEFAULT_TARGET_TAGS,
    EVENT_EXPLICIT_CHOICE,
    EVENT_GENERAL_REFERENCE,
    EVENT_LAUNCH,
    POLARITY_AFFIRM,
    POLARITY_DENY,
)
from .errors import UnknownQuestionReferenceError


class _WireModel(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class Question(_WireModel):
    """A single line-item of the questionnaire."""

    id: str
    text: str | None = None  # Rendering hint for collaborators
    # Tags that let a general reference event address this question
    target_tags: frozenset[str] = Field(default=DEFAULT_TARGET_TAGS)
    action_tags: frozenset[str] = Field(default=DEFAULT_ACTION_TAGS)


class Choice(_WireModel):
    """One answer option shared by every question."""

    id: str
    text: str | None = None


class QuestionnaireModel(_WireModel):
    """Static questionnaire content."""

    questions: list[Question] = Field(default_factory=list)
    choices: list[Choice] = Field(default_factory=list)
    implied_choice_for_affirm: str | None = None
    implied_choice_for_deny: str | None = None

    @model_validator(mode="after")
    def _check_references(self) -> QuestionnaireModel:
        question_ids = [q.id for q in self.questions]
        if len(question_ids) != len(set(question_ids)):
            raise ValueError("Question ids must be unique")
        choice_ids = [c.id for c in self.choices]
        if len(choice_ids) != len(set(choice_ids)):
            raise ValueError("Choice ids must be unique")
        if self.questions and not self.choices:
            raise ValueError("A questionnaire with questions must declare at least one choice")
        for implied in (self.implied_choice_for_affirm, self.implied_choice_for_deny):
            if implied is not None and implied not in choice_ids:
                raise ValueError(f"Implied choice '{implied}' is not a declared choice")
        return self

    @property
    def question_ids(self) -> list[str]:
        return [q.id for q in self.questions]

    @property
    def choice_ids(self) -> list[str]:
        return [c.id for c in self.choices]

    def question_by_id(self, question_id: str | None) -> Question | None:
        """Get question by ID."""
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def require_question(self, question_id: str | None) -> Question:
        """Get question by ID, raising if the model does not declare it."""
        question = self.question_by_id(question_id)
        if question is None:
            raise UnknownQuestionReferenceError(question_id, self.question_ids)
        return question

    def question_index(self, question_id: str) -> int:
        return self.question_ids.index(self.require_question(question_id).id)

    def has_choice(self, choice_id: str | None) -> bool:
        return choice_id is not None and choice_id in self.choice_ids

    def questions_tagged(self, target_tag: str) -> list[Question]:
        """Questions that register ``target_tag``."""
        return [q for q in self.questions if target_tag in q.target_tags]


# ---------------------------------------------------------------------------
# Structured input events (produced by an external NLU collaborator)
# ---------------------------------------------------------------------------


class LaunchEvent(_WireModel):
    """The session (or the questionnaire) was opened without further content."""

    kind: Literal["launch"] = EVENT_LAUNCH


class GeneralReferenceEvent(_WireModel):
    """Bare yes/no and/or a reference to an action or target.

    Examples: "yes", "no", "yes to the headache one", "go to headache".
    """

    kind: Literal["generalReference"] = EVENT_GENERAL_REFERENCE
    polarity: Literal["affirm", "deny"] | None = None
    action_tag: str | None = None
    target_tag: str | None = None

    @property
    def is_affirm(self) -> bool:
        return self.polarity == POLARITY_AFFIRM

    @property
    def is_deny(self) -> bool:
        return self.polarity == POLARITY_DENY


class ExplicitChoiceEvent(_WireModel):
    """The user named a choice, optionally for a named question.

    ``low_confidence`` is set by the interpreter when the mapping to
    ``choice_id`` is uncertain; such answers are at risk of misunderstanding.
    """

    kind: Literal["explicitChoice"] = EVENT_EXPLICIT_CHOICE
    choice_id: str
    question_ref: str | None = None
    action_tag: str | None = None
    target_tag: str | None = None
    low_confidence: bool = False


InputEvent = Annotated[
    LaunchEvent | GeneralReferenceEvent | ExplicitChoiceEvent,
    Field(discriminator="kind"),
]

_EVENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(InputEvent)


def parse_event(data: dict[str, Any] | InputEvent) -> InputEvent:
    """Build a structured input event from its wire form."""
    if isinstance(data, LaunchEvent | GeneralReferenceEvent | ExplicitChoiceEvent):
        return data
    return _EVENT_ADAPTER.validate_python(data)


class CompletionFailure(_WireModel):
    """Why a questionnaire is not considered sufficiently complete."""

    reason_code: str
    rendered_reason: str | None = None
