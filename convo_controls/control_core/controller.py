"""Turn controller: resolve, react, then take the initiative if needed.

The controller never mutates the caller's state. Each turn works on a copy held
by a ``TurnFrame`` and the updated copy is returned in the ``TurnResult``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..core.logging import turn_scope
from .acts import SystemAct
from .config_types import ResolvedControlConfig
from .errors import InconsistentInvocationOrderError, UnhandledInputError
from .handlers import GuardedHandlerRegistry, Resolution, TurnFrame
from .ir import InputEvent
from .state import QuestionnaireState, TurnContext

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TurnResult:
    """New state and emitted acts of one processed turn."""

    state: QuestionnaireState
    acts: list[SystemAct] = field(default_factory=list)
    handler_name: str | None = None
    initiative_name: str | None = None
    turn_id: str | None = None

    @property
    def initiative_act(self) -> SystemAct | None:
        for act in self.acts:
            if act.is_initiative:
                return act
        return None

    @property
    def has_initiative_act(self) -> bool:
        return self.initiative_act is not None

    def to_dict(self) -> dict:
        return {
            "state": self.state.to_dict(),
            "acts": [act.to_dict() for act in self.acts],
            "handler": self.handler_name,
            "initiative": self.initiative_name,
            "turnId": self.turn_id,
        }


class TurnController:
    """Orchestrates one conversational turn for a single control.

    Ordering guarantee: the reactive response is computed completely before an
    initiative act is attempted, and at most one initiative act is emitted.
    """

    def __init__(self, config: ResolvedControlConfig, registry: GuardedHandlerRegistry) -> None:
        self._config = config
        self._registry = registry

    @property
    def registry(self) -> GuardedHandlerRegistry:
        return self._registry

    def begin_turn(
        self,
        event: InputEvent | None,
        state: QuestionnaireState,
        context: TurnContext | None = None,
    ) -> TurnFrame:
        """Create the turn's working frame; the questionnaire model is resolved once here."""
        context = context or TurnContext()
        return TurnFrame(
            control_id=self._config.id,
            context=context,
            state=state.copy(),
            model=self._config.questionnaire(context),
            config=self._config,
            event=event,
        )

    def resolve(self, frame: TurnFrame) -> Resolution:
        with turn_scope(frame.turn_id):
            return self._registry.resolve(frame)

    def apply(self, resolution: Resolution, frame: TurnFrame) -> TurnResult:
        """Apply a resolved turn handler, then the initiative step.

        Raises:
            InconsistentInvocationOrderError: If the resolution did not match,
                belongs to another turn, or the frame was already applied
        """
        with turn_scope(frame.turn_id):
            if frame.applied:
                message = f"{frame.control_id}: turn {frame.turn_id} was already applied"
                logger.error(message)
                raise InconsistentInvocationOrderError(message, turn_id=frame.turn_id)
            if resolution.kind != "turn":
                message = f"{frame.control_id}: expected a turn resolution, got '{resolution.kind}'"
                logger.error(message)
                raise InconsistentInvocationOrderError(message, turn_id=frame.turn_id)

            resolution.apply(frame)
            frame.applied = True
            initiative_name = self._initiative_step(frame)
            return self._result(frame, resolution.handler_name, initiative_name)

    def process_turn(
        self,
        event: InputEvent,
        state: QuestionnaireState,
        context: TurnContext | None = None,
    ) -> TurnResult:
        """Process one structured input event.

        Raises:
            UnhandledInputError: If no turn handler claims the event
        """
        frame = self.begin_turn(event, state, context)
        with turn_scope(frame.turn_id):
            logger.info(f"{frame.control_id}: processing '{event.kind}' event")
            resolution = self.resolve(frame)
            if not resolution:
                logger.info(f"{frame.control_id}: declined '{event.kind}' event")
                raise UnhandledInputError(frame.control_id, event.kind, frame.turn_id)
            return self.apply(resolution, frame)

    def can_take_initiative(self, state: QuestionnaireState, context: TurnContext | None = None) -> bool:
        frame = self.begin_turn(None, state, context)
        with turn_scope(frame.turn_id):
            return self._registry.resolve_initiative(frame).matched

    def take_initiative(self, state: QuestionnaireState, context: TurnContext | None = None) -> TurnResult:
        """Offer the initiative on a turn whose input was handled elsewhere."""
        frame = self.begin_turn(None, state, context)
        with turn_scope(frame.turn_id):
            initiative_name = self._initiative_step(frame)
            frame.applied = True
            return self._result(frame, None, initiative_name)

    def _initiative_step(self, frame: TurnFrame) -> str | None:
        if frame.has_initiative_act:
            logger.debug(f"{frame.control_id}: initiative already taken by '{frame.initiative_act.name}'")  # type: ignore[union-attr]
            return None
        resolution = self._registry.resolve_initiative(frame)
        if not resolution:
            return None
        resolution.apply(frame)
        return resolution.handler_name

    def _result(self, frame: TurnFrame, handler_name: str | None, initiative_name: str | None) -> TurnResult:
        logger.info(
            f"{frame.control_id}: turn complete handler={handler_name} initiative={initiative_name} "
            f"acts={[act.name for act in frame.acts]}"
        )
        return TurnResult(
            state=frame.state,
            acts=list(frame.acts),
            handler_name=handler_name,
            initiative_name=initiative_name,
            turn_id=frame.turn_id,
        )
