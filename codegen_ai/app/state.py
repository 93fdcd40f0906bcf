"""Interaction state machine.

Owns the UI state and decides, for every event, the next state and the
command (if any) the runtime must carry out. It never performs network I/O
itself; generation is requested through a DispatchGeneration command and
its result comes back later as a GenerationOutcome event.

Phases:
    BROWSING -> AWAITING_RESULT -> SHOWING_RESULT | SHOWING_ERROR -> BROWSING
    any phase -> EXITING (on Quit)
"""

from __future__ import annotations

import itertools
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from codegen_ai.catalog import PromptSource, Template
from codegen_ai.events import (
    AppEvent,
    Command,
    Confirm,
    Dismiss,
    DispatchGeneration,
    ExitApplication,
    GenerationFailure,
    GenerationOutcome,
    GenerationText,
    MoveDown,
    MoveUp,
    Quit,
)
from codegen_ai.exceptions import PromptSourceError
from codegen_ai.logging import get_logger

logger = get_logger(__name__)


class Phase(str, Enum):
    """Interaction phase."""

    BROWSING = "browsing"
    AWAITING_RESULT = "awaiting_result"
    SHOWING_RESULT = "showing_result"
    SHOWING_ERROR = "showing_error"
    EXITING = "exiting"


VALID_TRANSITIONS: dict[Phase, set[Phase]] = {
    Phase.BROWSING: {Phase.AWAITING_RESULT, Phase.EXITING},
    Phase.AWAITING_RESULT: {Phase.SHOWING_RESULT, Phase.SHOWING_ERROR, Phase.EXITING},
    Phase.SHOWING_RESULT: {Phase.BROWSING, Phase.EXITING},
    Phase.SHOWING_ERROR: {Phase.BROWSING, Phase.EXITING},
    Phase.EXITING: set(),
}


@dataclass
class InteractionState:
    """Everything the presenter needs to draw the screen.

    Attributes:
        items: Templates in display order.
        cursor: Highlighted index; valid only when items is non-empty.
        phase: Current interaction phase.
        selected_index: Index fixed when a generation was dispatched.
        last_result: Generated text, only in SHOWING_RESULT.
        last_error: Gateway failure text, only in SHOWING_ERROR.
        inline_error: Prompt read failure shown in the list view.
        request_id: Identifier of the in-flight dispatch.
    """

    items: tuple[Template, ...] = ()
    cursor: int = 0
    phase: Phase = Phase.BROWSING
    selected_index: int | None = None
    last_result: str | None = None
    last_error: str | None = None
    inline_error: str | None = None
    request_id: int | None = None

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to select."""
        return not self.items

    @property
    def current(self) -> Template | None:
        """Template under the cursor."""
        if self.is_empty:
            return None
        return self.items[self.cursor]

    @property
    def selected(self) -> Template | None:
        """Template fixed for the current generation."""
        if self.selected_index is None:
            return None
        return self.items[self.selected_index]


class InteractionStateMachine:
    """Applies events to InteractionState.

    All mutation happens in handle(), which the runtime calls from a single
    consumer of the event queue.
    """

    def __init__(self, items: Sequence[Template], prompt_source: PromptSource) -> None:
        """Initialize state machine.

        Args:
            items: Templates to choose from. Names must be unique.
            prompt_source: Reads prompt text for the confirmed template.
        """
        names = [item.name for item in items]
        if len(set(names)) != len(names):
            raise ValueError("Template names must be unique")

        self._state = InteractionState(items=tuple(items))
        self._prompt_source = prompt_source
        self._request_ids = itertools.count(1)
        self._observers: list[Callable[[Phase, Phase], None]] = []

    @property
    def state(self) -> InteractionState:
        """Current state (read-only for callers)."""
        return self._state

    @property
    def phase(self) -> Phase:
        """Current phase."""
        return self._state.phase

    @property
    def is_exiting(self) -> bool:
        """True once Quit has been handled."""
        return self._state.phase == Phase.EXITING

    def add_observer(self, callback: Callable[[Phase, Phase], None]) -> None:
        """Add phase change observer.

        Args:
            callback: Function called with (old_phase, new_phase).
        """
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[Phase, Phase], None]) -> None:
        """Remove phase change observer."""
        if callback in self._observers:
            self._observers.remove(callback)

    def handle(self, event: AppEvent) -> Command | None:
        """Apply one event.

        Args:
            event: Input event or generation outcome.

        Returns:
            Command for the runtime to execute, or None.
        """
        if self.is_exiting:
            return None

        if isinstance(event, Quit):
            self._transition(Phase.EXITING)
            return ExitApplication()
        if isinstance(event, GenerationOutcome):
            self._on_outcome(event)
            return None
        if isinstance(event, Dismiss):
            self._on_dismiss()
            return None

        if self._state.phase != Phase.BROWSING:
            return None

        if isinstance(event, MoveUp):
            if self._state.cursor > 0:
                self._state.cursor -= 1
        elif isinstance(event, MoveDown):
            if self._state.cursor < len(self._state.items) - 1:
                self._state.cursor += 1
        elif isinstance(event, Confirm):
            return self._on_confirm()
        return None

    def _on_confirm(self) -> Command | None:
        state = self._state
        template = state.current
        if template is None:
            return None

        try:
            prompt = self._prompt_source.read_prompt(template.name)
        except (PromptSourceError, OSError) as e:
            state.inline_error = str(e)
            return None

        request_id = next(self._request_ids)
        state.inline_error = None
        state.selected_index = state.cursor
        state.request_id = request_id
        self._transition(Phase.AWAITING_RESULT)
        logger.info("Dispatching generation #%d for template %s", request_id, template.name)
        return DispatchGeneration(request_id=request_id, template_name=template.name, prompt=prompt)

    def _on_outcome(self, outcome: GenerationOutcome) -> None:
        state = self._state
        if state.phase != Phase.AWAITING_RESULT or outcome.request_id != state.request_id:
            logger.warning(
                "Ignoring generation outcome #%d in phase %s (expected #%s)",
                outcome.request_id,
                state.phase.value,
                state.request_id,
            )
            return

        state.request_id = None
        if isinstance(outcome, GenerationText):
            logger.info("Generation #%d succeeded (%d chars)", outcome.request_id, len(outcome.text))
            state.last_result = outcome.text
            self._transition(Phase.SHOWING_RESULT)
        elif isinstance(outcome, GenerationFailure):
            logger.error("Generation #%d failed: %s", outcome.request_id, outcome.reason)
            state.last_error = outcome.reason
            self._transition(Phase.SHOWING_ERROR)

    def _on_dismiss(self) -> None:
        state = self._state
        if state.phase not in (Phase.SHOWING_RESULT, Phase.SHOWING_ERROR):
            return
        state.last_result = None
        state.last_error = None
        state.selected_index = None
        self._transition(Phase.BROWSING)

    def _transition(self, new_phase: Phase) -> None:
        old_phase = self._state.phase
        if new_phase not in VALID_TRANSITIONS[old_phase]:
            raise RuntimeError(f"Invalid transition: {old_phase.value} -> {new_phase.value}")
        self._state.phase = new_phase

        for observer in self._observers:
            observer(old_phase, new_phase)
