"""Registry of guarded turn and initiative handlers.

This module centralizes the dispatch policy: every guard is evaluated, the
earliest match in configuration order wins, and overlapping guards are reported
as a diagnostic rather than an error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

from ...settings import get_settings
from ..errors import AmbiguousMatch, InconsistentInvocationOrderError
from .base import InitiativeHandler, TurnFrame, TurnHandler

logger = logging.getLogger(__name__)

AmbiguityReporter = Callable[[AmbiguousMatch], None]


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of one guard-resolution pass.

    The resolution carries the chosen handler explicitly so it can be threaded
    into the apply step; it is stamped with the turn it was computed for.
    """

    kind: Literal["turn", "initiative"]
    turn_id: str
    handler: TurnHandler | InitiativeHandler | None = None
    matches: tuple[str, ...] = ()

    @property
    def matched(self) -> bool:
        return self.handler is not None

    @property
    def is_ambiguous(self) -> bool:
        return len(self.matches) > 1

    @property
    def handler_name(self) -> str | None:
        return self.handler.name if self.handler is not None else None

    def __bool__(self) -> bool:
        return self.matched

    def apply(self, frame: TurnFrame) -> None:
        """Apply the chosen handler's effect to ``frame``."""
        if self.handler is None:
            message = (
                f"{frame.control_id}: {self.kind} effect applied but no handler was resolved. "
                "Are resolve/apply out of sync?"
            )
            logger.error(message)
            raise InconsistentInvocationOrderError(message, turn_id=frame.turn_id)
        if self.turn_id != frame.turn_id:
            message = (
                f"{frame.control_id}: resolution for turn {self.turn_id} "
                f"applied in turn {frame.turn_id}"
            )
            logger.error(message)
            raise InconsistentInvocationOrderError(message, turn_id=frame.turn_id)
        self.handler.apply(frame)


class GuardedHandlerRegistry:
    """Ordered turn and initiative handlers for one control.

    Standard handlers come first, then caller-supplied custom handlers, each in
    configuration order. Handlers within one list are expected to have mutually
    exclusive guards.
    """

    def __init__(
        self,
        control_id: str,
        turn_handlers: Iterable[TurnHandler] = (),
        initiative_handlers: Iterable[InitiativeHandler] = (),
        on_ambiguous_match: AmbiguityReporter | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            control_id: Owning control, used in diagnostics
            turn_handlers: Turn handlers in resolution order
            initiative_handlers: Initiative handlers in resolution order
            on_ambiguous_match: Optional sink for ambiguity diagnostics
        """
        self._control_id = control_id
        self._turn_handlers: list[TurnHandler] = []
        self._initiative_handlers: list[InitiativeHandler] = []
        self._on_ambiguous_match = on_ambiguous_match

        for handler in turn_handlers:
            self.register(handler)
        for initiative in initiative_handlers:
            self.register_initiative(initiative)

        logger.debug(
            f"{control_id}: registered {len(self._turn_handlers)} turn handlers and "
            f"{len(self._initiative_handlers)} initiative handlers"
        )

    def register(self, handler: TurnHandler) -> None:
        """Append a turn handler.

        Raises:
            ValueError: If a turn handler with the same name is already registered
        """
        if any(h.name == handler.name for h in self._turn_handlers):
            raise ValueError(f"Turn handler '{handler.name}' is already registered")
        self._turn_handlers.append(handler)

    def register_initiative(self, handler: InitiativeHandler) -> None:
        """Append an initiative handler.

        Raises:
            ValueError: If an initiative handler with the same name is already registered
        """
        if any(h.name == handler.name for h in self._initiative_handlers):
            raise ValueError(f"Initiative handler '{handler.name}' is already registered")
        self._initiative_handlers.append(handler)

    def list_handlers(self) -> list[str]:
        return [h.name for h in self._turn_handlers]

    def list_initiative_handlers(self) -> list[str]:
        return [h.name for h in self._initiative_handlers]

    def resolve(self, frame: TurnFrame) -> Resolution:
        """Find the turn handler that claims the frame's event."""
        matching = [h for h in self._turn_handlers if h.can_handle(frame)]
        return self._select("turn", matching, frame)

    def resolve_initiative(self, frame: TurnFrame) -> Resolution:
        """Find the initiative handler that wants to act on the frame's state."""
        matching = [h for h in self._initiative_handlers if h.can_initiate(frame)]
        return self._select("initiative", matching, frame)

    def _select(
        self,
        kind: Literal["turn", "initiative"],
        matching: Sequence[TurnHandler | InitiativeHandler],
        frame: TurnFrame,
    ) -> Resolution:
        names = tuple(h.name for h in matching)
        if not matching:
            logger.debug(f"{self._control_id}: no {kind} handler matched")
            return Resolution(kind=kind, turn_id=frame.turn_id)

        chosen = matching[0]
        if len(matching) > 1:
            self._report_ambiguity(
                AmbiguousMatch(
                    control_id=self._control_id,
                    kind=kind,
                    chosen=chosen.name,
                    matches=names,
                    turn_id=frame.turn_id,
                )
            )
        logger.debug(f"{self._control_id}: resolved {kind} handler '{chosen.name}'")
        return Resolution(kind=kind, turn_id=frame.turn_id, handler=chosen, matches=names)

    def _report_ambiguity(self, diagnostic: AmbiguousMatch) -> None:
        logger.log(get_settings().ambiguous_match_level_no, diagnostic.describe())
        if self._on_ambiguous_match is not None:
            self._on_ambiguous_match(diagnostic)
