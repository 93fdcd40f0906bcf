"""Event and command types for the interaction loop.

Input events (key presses mapped to intents) and generation outcomes flow
through the same queue and are applied one at a time by the interaction
state machine. Commands are what the state machine asks the runtime to do
in response.
"""

from __future__ import annotations

from dataclasses import dataclass

# -----------------------------------------------------------------------------
# Input Events
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class AppEvent:
    """Base class for events consumed by the interaction state machine."""


@dataclass(frozen=True)
class MoveUp(AppEvent):
    """Move the cursor to the previous template."""


@dataclass(frozen=True)
class MoveDown(AppEvent):
    """Move the cursor to the next template."""


@dataclass(frozen=True)
class Confirm(AppEvent):
    """Select the template under the cursor and start generation."""


@dataclass(frozen=True)
class Dismiss(AppEvent):
    """Leave the result or error view and return to the list."""


@dataclass(frozen=True)
class Quit(AppEvent):
    """Exit the application."""


# -----------------------------------------------------------------------------
# Generation Outcomes
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class GenerationOutcome(AppEvent):
    """Result of one dispatched generation request.

    Attributes:
        request_id: Identifier of the dispatch that produced this outcome.
    """

    request_id: int = 0


@dataclass(frozen=True)
class GenerationText(GenerationOutcome):
    """Generation succeeded with text."""

    text: str = ""


@dataclass(frozen=True)
class GenerationFailure(GenerationOutcome):
    """Generation failed.

    Attributes:
        reason: Human-readable failure description.
    """

    reason: str = ""


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Command:
    """Base class for side effects requested by the state machine."""


@dataclass(frozen=True)
class DispatchGeneration(Command):
    """Start one background generation request."""

    request_id: int
    template_name: str
    prompt: str


@dataclass(frozen=True)
class ExitApplication(Command):
    """Stop the interaction loop."""
