"""TUI application for codegen-ai.

A full-screen prompt_toolkit application showing the presenter output.
Key presses are translated into events and posted to the interaction
runtime; the screen is redrawn after every applied event. Long output
scrolls with PageUp/PageDown (Ctrl+Up/Down, or Shift+Up/Down on macOS).
A crash of the interaction runtime ends the UI and is re-raised from run().

Example:
    from codegen_ai.app.tui import TUIApp

    async with TUIApp(config, templates, prompt_source, gateway) as app:
        await app.run()
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
from collections.abc import Sequence
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING

from prompt_toolkit import Application
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout, ScrollablePane, Window
from prompt_toolkit.layout.controls import FormattedTextControl

from codegen_ai.app.state import InteractionState, InteractionStateMachine, Phase
from codegen_ai.backends.base import GenerationGateway
from codegen_ai.catalog import PromptSource, Template
from codegen_ai.config import CodegenConfig
from codegen_ai.display import PresenterStyles, RichRenderer, render
from codegen_ai.events import AppEvent, Confirm, Dismiss, MoveDown, MoveUp, Quit
from codegen_ai.logging import configure_tui_logging, get_logger
from codegen_ai.runtime import InteractionRuntime

if TYPE_CHECKING:
    from prompt_toolkit.key_binding import KeyPressEvent

logger = get_logger(__name__)

# Key -> event mapping
KEY_EVENTS: dict[str, type[AppEvent]] = {
    "up": MoveUp,
    "k": MoveUp,
    "down": MoveDown,
    "j": MoveDown,
    "enter": Confirm,
    "escape": Dismiss,
    "backspace": Dismiss,
    "q": Quit,
    "c-c": Quit,
}

# Lines moved per scroll key press
SCROLL_STEP = 10


@dataclass
class TUIApp:
    """Main TUI application class.

    Manages the lifecycle of:
    - the generation gateway (closed on exit)
    - the interaction runtime
    - the prompt_toolkit Application

    Usage:
        async with TUIApp(config, templates, prompt_source, gateway) as app:
            await app.run()
    """

    config: CodegenConfig
    templates: Sequence[Template]
    prompt_source: PromptSource
    gateway: GenerationGateway
    log_dir: Path | None = None

    _exit_stack: AsyncExitStack | None = field(default=None, init=False, repr=False)
    _machine: InteractionStateMachine | None = field(default=None, init=False)
    _runtime: InteractionRuntime | None = field(default=None, init=False)
    _runtime_task: asyncio.Task[None] | None = field(default=None, init=False)
    _app: Application[None] | None = field(default=None, init=False, repr=False)
    _screen_pane: ScrollablePane | None = field(default=None, init=False, repr=False)
    _last_phase: Phase | None = field(default=None, init=False)
    _styles: PresenterStyles = field(default_factory=PresenterStyles, init=False)

    def __post_init__(self) -> None:
        self._styles = PresenterStyles.from_config(self.config.display)
        self._machine = InteractionStateMachine(self.templates, self.prompt_source)
        self._runtime = InteractionRuntime(
            self._machine,
            self.gateway,
            request_timeout=self.config.general.request_timeout,
            on_change=self._on_state_change,
        )

    @property
    def runtime(self) -> InteractionRuntime:
        """Interaction runtime."""
        if self._runtime is None:
            raise RuntimeError("TUIApp runtime not initialized")
        return self._runtime

    @property
    def state(self) -> InteractionState:
        """Current interaction state."""
        return self.runtime.state

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def __aenter__(self) -> TUIApp:
        """Initialize resources."""
        self._exit_stack = AsyncExitStack()
        await self._exit_stack.__aenter__()
        await self._exit_stack.enter_async_context(self.gateway)

        if self.log_dir is not None:
            level = logging.getLevelName(self.config.logging.level.upper())
            log_file = configure_tui_logging(self.log_dir, level if isinstance(level, int) else logging.INFO)
            logger.info("Logging to %s", log_file)

        logger.info("TUIApp initialized with %d templates", len(self.templates))
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        """Cleanup resources."""
        await self._stop_runtime()

        if self._exit_stack:
            result = await self._exit_stack.__aexit__(exc_type, exc_val, exc_tb)
            self._exit_stack = None
            return result
        return None

    # =========================================================================
    # Rendering
    # =========================================================================

    def _get_terminal_width(self) -> int:
        """Get current terminal width for Rich rendering."""
        if self._app and self._app.output:
            return self._app.output.get_size().columns
        return 100

    def _get_screen_text(self) -> ANSI:
        """Render the current state for display."""
        renderer = RichRenderer(width=self._get_terminal_width(), color=self.config.display.color)
        return ANSI(render(self.state, self._styles, renderer))

    def _get_max_scroll(self) -> int:
        """Calculate maximum scroll position."""
        total_lines = self._get_screen_text().value.count("\n") + 1
        if self._app and self._app.output:
            visible_height = self._app.output.get_size().rows
        else:
            visible_height = 24
        return max(0, total_lines - visible_height)

    def _scroll(self, delta: int) -> None:
        if self._screen_pane is None:
            return
        new_scroll = self._screen_pane.vertical_scroll + delta
        self._screen_pane.vertical_scroll = max(0, min(new_scroll, self._get_max_scroll()))

    def _on_state_change(self, state: InteractionState) -> None:
        if state.phase != self._last_phase:
            self._last_phase = state.phase
            if self._screen_pane is not None:
                self._screen_pane.vertical_scroll = 0
        if self._app:
            self._app.invalidate()

    # =========================================================================
    # UI Setup
    # =========================================================================

    def _setup_keybindings(self) -> KeyBindings:
        """Set up keyboard bindings that post events to the runtime."""
        kb = KeyBindings()

        def _bind(key: str, event_type: type[AppEvent]) -> None:
            @kb.add(key)
            def _handler(event: KeyPressEvent) -> None:
                self.runtime.post(event_type())

        for key, event_type in KEY_EVENTS.items():
            _bind(key, event_type)

        def _scroll_up(event: KeyPressEvent) -> None:
            """Scroll the screen up."""
            self._scroll(-SCROLL_STEP)

        def _scroll_down(event: KeyPressEvent) -> None:
            """Scroll the screen down."""
            self._scroll(SCROLL_STEP)

        kb.add("pageup")(_scroll_up)
        kb.add("pagedown")(_scroll_down)
        if sys.platform == "darwin":
            kb.add("s-up")(_scroll_up)
            kb.add("s-down")(_scroll_down)
        else:
            kb.add("c-up")(_scroll_up)
            kb.add("c-down")(_scroll_down)

        return kb

    def _on_runtime_done(self, task: asyncio.Task[None]) -> None:
        """Exit the UI once the runtime stops (Quit or crash)."""
        if not task.cancelled() and task.exception() is not None:
            exc = task.exception()
            logger.error("Interaction runtime crashed: %s: %s", type(exc).__name__, exc)
        if self._app and self._app.is_running:
            self._app.exit()

    async def _stop_runtime(self) -> None:
        task = self._runtime_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._runtime_task = None

    # =========================================================================
    # Main Run Loop
    # =========================================================================

    async def run(self) -> None:
        """Run the TUI application until the user quits."""
        screen = Window(
            content=FormattedTextControl(self._get_screen_text),
            wrap_lines=True,
        )
        self._screen_pane = ScrollablePane(
            screen,
            keep_cursor_visible=False,
            keep_focused_window_visible=False,
        )
        self._app = Application(
            layout=Layout(self._screen_pane),
            key_bindings=self._setup_keybindings(),
            full_screen=True,
        )

        runtime_task = asyncio.create_task(self.runtime.run())
        runtime_task.add_done_callback(self._on_runtime_done)
        self._runtime_task = runtime_task

        try:
            await self._app.run_async()
        except Exception as e:
            # Re-raise to be caught by cli.py with proper error display
            raise RuntimeError(f"TUI crashed: {e}") from e
        finally:
            await self._stop_runtime()

        if runtime_task.done() and not runtime_task.cancelled():
            exc = runtime_task.exception()
            if exc is not None:
                raise RuntimeError(f"Interaction runtime crashed: {type(exc).__name__}: {exc}") from exc
