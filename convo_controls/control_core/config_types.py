"""Typed configuration for questionnaire controls.

``QuestionnaireControlConfig`` is what callers write: every behavioural field is
optional. ``resolve_config`` fills the defaults field by field and normalizes
"value or per-turn function" props into callables, producing the
``ResolvedControlConfig`` the rest of the core reads.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Literal, Union

from .errors import AmbiguousMatch
from .handlers.base import InitiativeHandler, TurnHandler
from .ir import CompletionFailure, QuestionnaireModel
from .state import QuestionnaireState, TurnContext

BoolProp = Union[bool, Callable[[TurnContext], bool]]
ModelProp = Union[QuestionnaireModel, Callable[[TurnContext], QuestionnaireModel]]
CompletionResult = Union[Literal[True], CompletionFailure]
CompletionFunction = Callable[[QuestionnaireState, TurnContext], CompletionResult]

DEFAULT_REQUIRED = True
DEFAULT_ANSWER_CONFIRMATION_REQUIRED = False
DEFAULT_IMPLIED_ANSWER_AT_RISK = False


def always_complete(_state: QuestionnaireState, _context: TurnContext) -> CompletionResult:
    return True


@dataclass(slots=True)
class QuestionnaireControlConfig:
    """Caller-facing configuration of a questionnaire control."""

    id: str
    questionnaire: ModelProp

    # Determines if the control must obtain answers and take the initiative
    # when given the opportunity. Default: True
    required: BoolProp | None = None
    # Whether at-risk answers need explicit confirmation. Default: False
    answer_confirmation_required: BoolProp | None = None
    # Completion sufficiency; one function or several evaluated in order.
    # Default: always complete
    completion: CompletionFunction | Sequence[CompletionFunction] | None = None

    # Fallbacks used when the model does not declare an implied choice
    implied_choice_for_affirm: str | None = None
    implied_choice_for_deny: str | None = None
    # Whether answers derived from a bare yes/no are flagged at risk. Default: False
    implied_answer_at_risk: bool | None = None

    # Evaluated after the built-in handlers, in order
    custom_handlers: Sequence[TurnHandler] = field(default_factory=tuple)
    custom_initiative_handlers: Sequence[InitiativeHandler] = field(default_factory=tuple)

    on_ambiguous_match: Callable[[AmbiguousMatch], None] | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.id.strip():
            raise ValueError("Control id cannot be empty")


@dataclass(frozen=True, slots=True)
class ResolvedControlConfig:
    """Fully-populated configuration with per-turn props as callables."""

    id: str
    questionnaire: Callable[[TurnContext], QuestionnaireModel]
    required: Callable[[TurnContext], bool]
    answer_confirmation_required: Callable[[TurnContext], bool]
    completion: tuple[CompletionFunction, ...]
    implied_choice_for_affirm: str | None
    implied_choice_for_deny: str | None
    implied_answer_at_risk: bool
    custom_handlers: tuple[TurnHandler, ...]
    custom_initiative_handlers: tuple[InitiativeHandler, ...]
    on_ambiguous_match: Callable[[AmbiguousMatch], None] | None


def _bool_prop(value: BoolProp | None, default: bool) -> Callable[[TurnContext], bool]:
    if value is None:
        return lambda _ctx: default
    if isinstance(value, bool):
        return lambda _ctx: value
    return value


def _model_prop(value: ModelProp) -> Callable[[TurnContext], QuestionnaireModel]:
    if isinstance(value, QuestionnaireModel):
        return lambda _ctx: value
    if callable(value):
        return value
    raise TypeError(f"questionnaire must be a QuestionnaireModel or a function, got {type(value).__name__}")


def _completion_prop(
    value: CompletionFunction | Sequence[CompletionFunction] | None,
) -> tuple[CompletionFunction, ...]:
    if value is None:
        return (always_complete,)
    if callable(value):
        return (value,)
    functions = tuple(value)
    return functions or (always_complete,)


def resolve_config(config: QuestionnaireControlConfig) -> ResolvedControlConfig:
    """Fill every unset field of ``config`` with its default."""
    return ResolvedControlConfig(
        id=config.id,
        questionnaire=_model_prop(config.questionnaire),
        required=_bool_prop(config.required, DEFAULT_REQUIRED),
        answer_confirmation_required=_bool_prop(
            config.answer_confirmation_required, DEFAULT_ANSWER_CONFIRMATION_REQUIRED
        ),
        completion=_completion_prop(config.completion),
        implied_choice_for_affirm=config.implied_choice_for_affirm,
        implied_choice_for_deny=config.implied_choice_for_deny,
        implied_answer_at_risk=(
            DEFAULT_IMPLIED_ANSWER_AT_RISK
            if config.implied_answer_at_risk is None
            else config.implied_answer_at_risk
        ),
        custom_handlers=tuple(config.custom_handlers),
        custom_initiative_handlers=tuple(config.custom_initiative_handlers),
        on_ambiguous_match=config.on_ambiguous_match,
    )
