"""Presenter for the interaction state.

render() maps an InteractionState to a string: ANSI-styled for the TUI, or
plain text when color is disabled. It has no state of its own and never
mutates its input.

Example:
    styles = PresenterStyles.from_config(config.display)
    text = render(machine.state, styles, RichRenderer(width=100))
"""

from __future__ import annotations

from dataclasses import dataclass
from io import StringIO
from typing import Any

from rich.console import Console, Group, RenderableType
from rich.padding import Padding
from rich.text import Text

from codegen_ai.app.state import InteractionState, Phase
from codegen_ai.config import DisplayConfig

LIST_TITLE = "Select a Template"
SELECTED_TITLE = "Selected Template"
EMPTY_CATALOG = "No templates found"
NAVIGATION_HINT = "Use the up/down arrows to navigate and press Enter to select"
BACK_HINT = "Press 'Esc' or 'Backspace' to return to the list"
EXIT_HINT = "Press 'q' or 'Ctrl+C' to quit."
LOADING = "Waiting for the generation response..."
RESULT_HEADING = "Response:"
ERROR_HEADING = "API Error:"
GOODBYE = "Goodbye!"


@dataclass(frozen=True)
class PresenterStyles:
    """Rich style strings used by the presenter."""

    title: str = "bold #FAFAFA on #7D56F4"
    item: str = "#DDDDDD"
    selected_item: str = "bold #FFFFFF on #7D56F4"
    info: str = "italic #ABABAB"
    hint: str = "#FF5555"
    error: str = "bold #FFFFFF on #FF0000"
    loading: str = "bold #FFFF00"

    @classmethod
    def from_config(cls, config: DisplayConfig) -> PresenterStyles:
        return cls(
            title=config.title_style,
            item=config.item_style,
            selected_item=config.selected_style,
            info=config.info_style,
            hint=config.hint_style,
            error=config.error_style,
            loading=config.loading_style,
        )


class RichRenderer:
    """Convert Rich renderables to strings.

    A new Console is created per render call to ensure clean output.
    """

    def __init__(self, width: int | None = None, color: bool = True) -> None:
        self._width = width or 100
        self._color = color

    def render(self, renderable: Any, width: int | None = None) -> str:
        """Render Rich object to a string.

        Args:
            renderable: Rich renderable object
            width: Optional width override.
        """
        string_io = StringIO()
        console = Console(
            file=string_io,
            force_terminal=self._color,
            no_color=not self._color,
            width=width or self._width,
            highlight=False,
        )
        console.print(renderable)
        return string_io.getvalue()


def build_view(state: InteractionState, styles: PresenterStyles) -> RenderableType:
    """Build the Rich renderable for a state."""
    if state.phase == Phase.EXITING:
        return Text(GOODBYE, style=styles.info)
    if state.is_empty:
        return _empty_view(styles)
    if state.phase == Phase.BROWSING:
        return _list_view(state, styles)
    return _selected_view(state, styles)


def render(
    state: InteractionState,
    styles: PresenterStyles | None = None,
    renderer: RichRenderer | None = None,
) -> str:
    """Render a state to text."""
    view = build_view(state, styles or PresenterStyles())
    return (renderer or RichRenderer()).render(view).rstrip("\n")


def _title(text: str, styles: PresenterStyles) -> RenderableType:
    return Padding(Text(text, style=styles.title), (0, 0, 1, 0))


def _empty_view(styles: PresenterStyles) -> RenderableType:
    return Group(
        _title(LIST_TITLE, styles),
        Text(EMPTY_CATALOG, style=styles.info),
        Text(""),
        Text(EXIT_HINT, style=styles.hint),
    )


def _list_view(state: InteractionState, styles: PresenterStyles) -> RenderableType:
    rows: list[RenderableType] = [_title(LIST_TITLE, styles)]
    for index, template in enumerate(state.items):
        if index == state.cursor:
            rows.append(Text(f"> {template.name}", style=styles.selected_item))
        else:
            rows.append(Text(f"  {template.name}", style=styles.item))

    if state.inline_error:
        rows.append(Padding(Text(state.inline_error, style=styles.error), (1, 0)))
    else:
        rows.append(Text(""))

    rows.append(Text(NAVIGATION_HINT, style=styles.info))
    rows.append(Text(""))
    rows.append(Text(EXIT_HINT, style=styles.hint))
    return Group(*rows)


def _selected_view(state: InteractionState, styles: PresenterStyles) -> RenderableType:
    selected = state.selected
    rows: list[RenderableType] = [
        _title(SELECTED_TITLE, styles),
        Text(f"You selected: {selected.name if selected else ''}"),
        Text(""),
    ]

    if state.phase == Phase.AWAITING_RESULT:
        rows.append(Text(LOADING, style=styles.loading))
    elif state.phase == Phase.SHOWING_RESULT:
        rows.append(Text(RESULT_HEADING, style="bold"))
        rows.append(Text(""))
        rows.append(Text(state.last_result or ""))
    elif state.phase == Phase.SHOWING_ERROR:
        rows.append(Text(ERROR_HEADING, style="bold"))
        rows.append(Padding(Text(state.last_error or "", style=styles.error), (1, 0)))

    rows.append(Text(""))
    if state.phase != Phase.AWAITING_RESULT:
        rows.append(Text(BACK_HINT, style=styles.info))
        rows.append(Text(""))
    rows.append(Text(EXIT_HINT, style=styles.hint))
    return Group(*rows)
