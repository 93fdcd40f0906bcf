"""TUI application module.

This module provides the core interaction components:
- Phase: Interaction phase (for state machine)
- InteractionState: State read by the presenter
- InteractionStateMachine: Event handling and transitions

The prompt_toolkit shell lives in codegen_ai.app.tui (TUIApp).
"""

from __future__ import annotations

from codegen_ai.app.state import (
    VALID_TRANSITIONS,
    InteractionState,
    InteractionStateMachine,
    Phase,
)

__all__ = [
    "VALID_TRANSITIONS",
    "InteractionState",
    "InteractionStateMachine",
    "Phase",
]
