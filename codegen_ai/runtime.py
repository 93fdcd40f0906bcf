"""Interaction runtime.

Serializes input events and generation outcomes through one asyncio.Queue
and applies them to the state machine in arrival order. Generation runs in
a background task that reports back by posting a GenerationOutcome onto the
same queue; it never touches the interaction state.

Example:
    runtime = InteractionRuntime(machine, gateway, request_timeout=120)
    runtime.post(Confirm())
    await runtime.run()  # returns after Quit
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable

from codegen_ai.app.state import InteractionState, InteractionStateMachine, Phase
from codegen_ai.backends.base import GenerationGateway
from codegen_ai.events import (
    AppEvent,
    Command,
    DispatchGeneration,
    ExitApplication,
    GenerationFailure,
)
from codegen_ai.logging import get_logger

logger = get_logger(__name__)

StateListener = Callable[[InteractionState], None]


class InteractionRuntime:
    """Single-consumer event loop around InteractionStateMachine."""

    def __init__(
        self,
        machine: InteractionStateMachine,
        gateway: GenerationGateway,
        *,
        request_timeout: float | None = None,
        on_change: StateListener | None = None,
    ) -> None:
        """Initialize runtime.

        Args:
            machine: State machine to drive.
            gateway: Backend used for DispatchGeneration commands.
            request_timeout: Seconds per generation; None or 0 disables.
            on_change: Called with the state after every applied event.
        """
        self._machine = machine
        self._gateway = gateway
        self._request_timeout = request_timeout or None
        self._on_change = on_change
        self._queue: asyncio.Queue[AppEvent] = asyncio.Queue()
        self._dispatch_task: asyncio.Task[None] | None = None

        machine.add_observer(self._log_transition)

    @property
    def state(self) -> InteractionState:
        """Current interaction state."""
        return self._machine.state

    @property
    def dispatch_task(self) -> asyncio.Task[None] | None:
        """Background generation task, if one was started."""
        return self._dispatch_task

    def post(self, event: AppEvent) -> None:
        """Enqueue an event. Safe to call from key handlers."""
        self._queue.put_nowait(event)

    async def step(self) -> Command | None:
        """Wait for the next event and apply it.

        Returns:
            The command issued by the state machine, already started.
        """
        event = await self._queue.get()
        try:
            command = self._machine.handle(event)
            if isinstance(command, DispatchGeneration):
                self._start_dispatch(command)
            if self._on_change is not None:
                self._on_change(self._machine.state)
            return command
        finally:
            self._queue.task_done()

    async def run(self) -> None:
        """Process events until the state machine exits."""
        try:
            while True:
                command = await self.step()
                if isinstance(command, ExitApplication):
                    break
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """Cancel an in-flight generation; its outcome is discarded."""
        task = self._dispatch_task
        if task is not None and not task.done():
            logger.info("Cancelling in-flight generation")
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def _start_dispatch(self, command: DispatchGeneration) -> None:
        self._dispatch_task = asyncio.create_task(self._dispatch(command))

    async def _dispatch(self, command: DispatchGeneration) -> None:
        try:
            outcome = await self._gateway.dispatch(
                command.prompt,
                request_id=command.request_id,
                timeout=self._request_timeout,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Uncaught exception in generation #%d", command.request_id)
            outcome = GenerationFailure(request_id=command.request_id, reason=f"{type(e).__name__}: {e}")
        self.post(outcome)

    def _log_transition(self, old_phase: Phase, new_phase: Phase) -> None:
        logger.debug("Phase %s -> %s", old_phase.value, new_phase.value)
