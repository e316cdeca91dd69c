"""Handler records and the per-turn frame they operate on.

Handlers are plain records of ``(name, guard, apply)``. Guards only read the
frame; ``apply`` mutates the frame's working state and appends acts. Keeping
handlers as data lets the registry own the first-match policy in one place.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..acts import SystemAct
from ..errors import InconsistentInvocationOrderError
from ..ir import InputEvent, QuestionnaireModel
from ..state import QuestionnaireState, TurnContext

if TYPE_CHECKING:
    from ..config_types import ResolvedControlConfig


@dataclass(slots=True)
class TurnFrame:
    """Everything a handler may look at or change during one turn.

    ``model`` is resolved once when the frame is created so every handler in
    the turn sees the same questionnaire content.
    """

    control_id: str
    context: TurnContext
    state: QuestionnaireState
    model: QuestionnaireModel
    config: ResolvedControlConfig
    event: InputEvent | None = None
    acts: list[SystemAct] = field(default_factory=list)
    applied: bool = False

    @property
    def turn_id(self) -> str:
        return self.context.turn_id

    @property
    def has_initiative_act(self) -> bool:
        return any(act.is_initiative for act in self.acts)

    @property
    def initiative_act(self) -> SystemAct | None:
        for act in self.acts:
            if act.is_initiative:
                return act
        return None

    def is_required(self) -> bool:
        return self.config.required(self.context)

    def is_confirmation_required(self) -> bool:
        return self.config.answer_confirmation_required(self.context)

    def add_act(self, act: SystemAct) -> None:
        """Append a reactive act, or an initiative act if none was added yet."""
        if act.is_initiative:
            self.add_initiative_act(act)
            return
        self.acts.append(act)

    def add_initiative_act(self, act: SystemAct) -> None:
        """Append the turn's single initiative act and record it as outstanding."""
        if not act.is_initiative:
            raise TypeError(f"{type(act).__name__} is not an initiative act")
        if self.has_initiative_act:
            raise InconsistentInvocationOrderError(
                f"{self.control_id}: second initiative act '{act.name}' in one turn "
                f"(already emitted '{self.initiative_act.name}')",  # type: ignore[union-attr]
                turn_id=self.turn_id,
            )
        self.state.focus.active_initiative_name = act.name
        self.acts.append(act)


TurnGuard = Callable[[TurnFrame], bool]
Effect = Callable[[TurnFrame], None]


@dataclass(frozen=True, slots=True)
class TurnHandler:
    """A guarded handler for the user's input event."""

    name: str
    can_handle: TurnGuard
    apply: Effect


@dataclass(frozen=True, slots=True)
class InitiativeHandler:
    """A guarded handler that lets the control speak proactively."""

    name: str
    can_initiate: TurnGuard
    apply: Effect
