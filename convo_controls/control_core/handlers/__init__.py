"""Guarded handler records and their registry.

Turn handlers react to the user's structured input event; initiative handlers
let a control speak proactively once the reactive response is computed.
"""

from .base import Effect, InitiativeHandler, TurnFrame, TurnGuard, TurnHandler
from .registry import AmbiguityReporter, GuardedHandlerRegistry, Resolution

__all__ = [
    "AmbiguityReporter",
    "Effect",
    "GuardedHandlerRegistry",
    "InitiativeHandler",
    "Resolution",
    "TurnFrame",
    "TurnGuard",
    "TurnHandler",
]
