"""Questionnaire control: a series of questions sharing one set of choices.

Capabilities:
- Activate the questionnaire and ask the first unanswered question.
- Answer the focused question with a bare "yes" (implied choice).
- Answer a question explicitly: "often" / "often for headache".
- Bring a question into focus: "go to headache".
- Confirm or reject an answer that is at risk of misunderstanding.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .answers import evaluate_completion
from .builtins import QuestionnaireBuiltIns
from .config_types import CompletionResult, QuestionnaireControlConfig, ResolvedControlConfig, resolve_config
from .confirmation import ConfirmationPolicy
from .controller import TurnController, TurnResult
from .errors import InconsistentInvocationOrderError
from .focus import FocusTracker
from .handlers import GuardedHandlerRegistry, Resolution, TurnFrame
from .ir import InputEvent, QuestionnaireModel, parse_event
from .state import QuestionnaireState, TurnContext

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PendingTurn:
    """A resolved but not yet applied turn.

    Returned by ``QuestionnaireControl.can_handle`` so a parent manager can
    decide between sibling controls before committing to one of them.
    """

    frame: TurnFrame
    resolution: Resolution

    @property
    def handler_name(self) -> str | None:
        return self.resolution.handler_name

    def __bool__(self) -> bool:
        return self.resolution.matched


class QuestionnaireControl:
    """Dialog control that asks a series of questions with shared choices."""

    def __init__(self, config: QuestionnaireControlConfig) -> None:
        self._config: ResolvedControlConfig = resolve_config(config)
        self._focus = FocusTracker()
        self._confirmation = ConfirmationPolicy(self._focus)
        self._builtins = QuestionnaireBuiltIns(self._focus, self._confirmation)

        registry = GuardedHandlerRegistry(
            control_id=self._config.id,
            turn_handlers=[*self._builtins.turn_handlers(), *self._config.custom_handlers],
            initiative_handlers=[
                *self._builtins.initiative_handlers(),
                *self._config.custom_initiative_handlers,
            ],
            on_ambiguous_match=self._config.on_ambiguous_match,
        )
        self._controller = TurnController(self._config, registry)
        logger.info(f"QuestionnaireControl '{self.id}' initialized")

    @property
    def id(self) -> str:
        return self._config.id

    @property
    def config(self) -> ResolvedControlConfig:
        return self._config

    @property
    def registry(self) -> GuardedHandlerRegistry:
        return self._controller.registry

    def create_state(self) -> QuestionnaireState:
        return QuestionnaireState()

    def clear(self) -> QuestionnaireState:
        """Return a fresh, empty state; persisted state is replaced, never mutated."""
        return QuestionnaireState()

    def questionnaire(self, context: TurnContext | None = None) -> QuestionnaireModel:
        return self._config.questionnaire(context or TurnContext())

    # ------------------------------------------------------------------
    # Turn processing
    # ------------------------------------------------------------------

    def process_turn(
        self,
        event: InputEvent | dict[str, Any],
        state: QuestionnaireState,
        context: TurnContext | None = None,
    ) -> TurnResult:
        """Handle one structured input event.

        Raises:
            UnhandledInputError: If no handler claims the event
        """
        return self._controller.process_turn(parse_event(event), state, context)

    def can_handle(
        self,
        event: InputEvent | dict[str, Any],
        state: QuestionnaireState,
        context: TurnContext | None = None,
    ) -> PendingTurn:
        """Resolve the event without applying it. The result is truthy on a match."""
        frame = self._controller.begin_turn(parse_event(event), state, context)
        return PendingTurn(frame=frame, resolution=self._controller.resolve(frame))

    def handle(self, pending: PendingTurn) -> TurnResult:
        """Apply a turn previously resolved by ``can_handle``.

        Raises:
            InconsistentInvocationOrderError: If ``pending`` did not match or was
                already handled
        """
        if not isinstance(pending, PendingTurn):
            raise InconsistentInvocationOrderError(
                f"{self.id}: handle() requires the result of can_handle(), got {type(pending).__name__}"
            )
        return self._controller.apply(pending.resolution, pending.frame)

    def can_take_initiative(self, state: QuestionnaireState, context: TurnContext | None = None) -> bool:
        return self._controller.can_take_initiative(state, context)

    def take_initiative(self, state: QuestionnaireState, context: TurnContext | None = None) -> TurnResult:
        return self._controller.take_initiative(state, context)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def evaluate_completion(
        self, state: QuestionnaireState, context: TurnContext | None = None
    ) -> CompletionResult:
        frame = self._controller.begin_turn(None, state, context)
        return evaluate_completion(frame)

    def is_ready(self, state: QuestionnaireState, context: TurnContext | None = None) -> bool:
        """Whether the control has obtained what it needs to be considered done."""
        context = context or TurnContext()
        if not self._config.required(context):
            return True
        if state.answers.is_empty():
            return False
        if self._config.answer_confirmation_required(context) and any(
            answer.at_risk_of_misunderstanding for answer in state.answers.entries.values()
        ):
            # An answer still awaiting confirmation is not final
            return False
        return self.evaluate_completion(state, context) is True

    def describe_state(self, state: QuestionnaireState) -> str:
        """Short label for state diagrams."""
        text = ""
        if state.focus.active_initiative_name is not None:
            text += f"[{state.focus.active_initiative_name}]"
        if state.focus.focus_question_id is not None:
            text += f"({state.focus.focus_question_id})"
        return text
