"""Dialog control core: guarded handlers, turn controller and the questionnaire control."""

from .acts import (
    AnswerConfirmedAct,
    AnswerDisconfirmedAct,
    AskQuestionAct,
    ConfirmAnswerAct,
    InitiativeAct,
    SystemAct,
)
from .builtins import QuestionnaireBuiltIns, implied_choice, implied_deny_handler
from .config_types import QuestionnaireControlConfig, ResolvedControlConfig, resolve_config
from .control import PendingTurn, QuestionnaireControl
from .controller import TurnController, TurnResult
from .errors import (
    AmbiguousMatch,
    ControlError,
    InconsistentInvocationOrderError,
    UnhandledInputError,
    UnknownChoiceReferenceError,
    UnknownQuestionReferenceError,
)
from .handlers import GuardedHandlerRegistry, InitiativeHandler, Resolution, TurnFrame, TurnHandler
from .ir import (
    Choice,
    CompletionFailure,
    ExplicitChoiceEvent,
    GeneralReferenceEvent,
    InputEvent,
    LaunchEvent,
    Question,
    QuestionnaireModel,
    parse_event,
)
from .state import Answer, AnswerStore, FocusState, QuestionnaireState, TurnContext

__all__ = [
    "AmbiguousMatch",
    "Answer",
    "AnswerConfirmedAct",
    "AnswerDisconfirmedAct",
    "AnswerStore",
    "AskQuestionAct",
    "Choice",
    "CompletionFailure",
    "ConfirmAnswerAct",
    "ControlError",
    "ExplicitChoiceEvent",
    "FocusState",
    "GeneralReferenceEvent",
    "GuardedHandlerRegistry",
    "InconsistentInvocationOrderError",
    "InitiativeAct",
    "InitiativeHandler",
    "InputEvent",
    "LaunchEvent",
    "PendingTurn",
    "Question",
    "QuestionnaireBuiltIns",
    "QuestionnaireControl",
    "QuestionnaireControlConfig",
    "QuestionnaireModel",
    "QuestionnaireState",
    "Resolution",
    "ResolvedControlConfig",
    "SystemAct",
    "TurnContext",
    "TurnController",
    "TurnFrame",
    "TurnHandler",
    "TurnResult",
    "UnhandledInputError",
    "UnknownChoiceReferenceError",
    "UnknownQuestionReferenceError",
    "implied_choice",
    "implied_deny_handler",
    "parse_event",
    "resolve_config",
]
