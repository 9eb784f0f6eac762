"""Terminal-independent list and popup widgets rendered to lines of text."""

from __future__ import annotations

import sys
import textwrap
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Generic, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

_LAST = sys.maxsize
HIGHLIGHT_SYMBOL = ">"


class KeyCode(Enum):
    LEFT = auto()
    RIGHT = auto()
    UP = auto()
    DOWN = auto()
    HOME = auto()
    END = auto()
    ENTER = auto()
    ESC = auto()
    BACKSPACE = auto()
    TAB = auto()
    CHAR = auto()
    OTHER = auto()


@dataclass(frozen=True)
class KeyEvent:
    """A key press; ``char`` holds the character when ``code`` is ``CHAR``."""

    code: KeyCode
    char: str = ""
    pressed: bool = True


@dataclass
class ListState:
    """Selected index and scroll offset of a list.

    ``select_last`` and moves past the end store an index that is clamped to
    the list's length when the list is read or drawn.
    """

    selected: Optional[int] = None
    offset: int = 0

    def select(self, index: Optional[int]) -> None:
        self.selected = index
        if index is None:
            self.offset = 0

    def select_first(self) -> None:
        self.selected = 0

    def select_last(self) -> None:
        self.selected = _LAST

    def select_next(self) -> None:
        self.selected = 0 if self.selected is None else min(self.selected + 1, _LAST)

    def select_previous(self) -> None:
        self.selected = _LAST if self.selected is None else max(self.selected - 1, 0)

    def _clamp(self, length: int) -> None:
        if length == 0:
            self.select(None)
        elif self.selected is not None:
            self.selected = min(self.selected, length - 1)


def _fit(text: str, width: int) -> str:
    return text.replace("\n", " ")[:width].ljust(width)


class SelectableList(Generic[T]):
    """A list of items with one optional selected entry."""

    def __init__(self, items: Iterable[T] = ()) -> None:
        self.items: List[T] = list(items)
        self.state = ListState()

    def set_items(self, items: Iterable[T]) -> None:
        self.items = list(items)
        self.select_none()

    def with_first_selected(self) -> "SelectableList[T]":
        self.select_first()
        return self

    def select_first(self) -> None:
        self.state.select_first()

    def select_last(self) -> None:
        self.state.select_last()

    def select_next(self) -> None:
        self.state.select_next()

    def select_previous(self) -> None:
        self.state.select_previous()

    def select_none(self) -> None:
        self.state.select(None)

    def selected(self) -> Optional[T]:
        index = self.state.selected
        if index is None or not self.items:
            return None
        return self.items[min(index, len(self.items) - 1)]

    def render(self, width: int, height: int, title: str) -> List[str]:
        """Draw a centred title followed by the visible rows, ``height`` lines in all."""
        if width <= 0 or height <= 0:
            return []
        self.state._clamp(len(self.items))
        lines = [_fit(title.center(width), width)]
        rows = height - 1
        selected = self.state.selected
        if selected is not None and rows > 0:
            if selected < self.state.offset:
                self.state.offset = selected
            elif selected >= self.state.offset + rows:
                self.state.offset = selected - rows + 1
        offset = min(self.state.offset, max(len(self.items) - 1, 0))
        visible = self.items[offset : offset + rows]
        for index, item in enumerate(visible, start=offset):
            marker = HIGHLIGHT_SYMBOL if index == selected else " "
            lines.append(_fit(marker + str(item), width))
        lines.extend(" " * width for _ in range(height - len(lines)))
        return lines


class FilterableList(Generic[T]):
    """A selectable list narrowed to items whose text contains the typed filter."""

    def __init__(self, items: Iterable[T] = ()) -> None:
        self.items: List[T] = list(items)
        self._list: SelectableList[T] = SelectableList(self.items)
        self.input_buffer = ""

    def with_first_selected(self) -> "FilterableList[T]":
        self.select_first()
        return self

    def set_items(self, items: Iterable[T]) -> None:
        self.items = list(items)
        self.filter_items()

    def filter_items(self) -> None:
        self._list.items = [it for it in self.items if self.input_buffer in str(it)]

    def filtered_items(self) -> List[T]:
        return self._list.items

    def select_first(self) -> None:
        self._list.select_first()

    def select_last(self) -> None:
        self._list.select_last()

    def select_next(self) -> None:
        self._list.select_next()

    def select_previous(self) -> None:
        self._list.select_previous()

    def select_none(self) -> None:
        self._list.select_none()

    def selected(self) -> Optional[T]:
        return self._list.selected()

    def update_filter(self, char: str) -> None:
        self.add_to_input(char)
        self.filter_items()

    def add_to_input(self, char: str) -> None:
        self.input_buffer += char

    def remove_last_input(self) -> None:
        self.input_buffer = self.input_buffer[:-1]
        self.filter_items()

    def render(self, width: int, height: int, title: str) -> List[str]:
        return self._list.render(width, height, title)


@dataclass
class PopupInfo:
    """A small titled box shown over a tab, possibly with live content."""

    title: str
    content_fn: Callable[[], str] = field(repr=False)
    is_loading: bool = False

    @classmethod
    def loading(cls) -> "PopupInfo":
        return cls("Loading", lambda: "Loading...", True)

    @classmethod
    def fixed(cls, title: str, content: str) -> "PopupInfo":
        return cls(title, lambda: content)

    @classmethod
    def dynamic(cls, title: str, content_fn: Callable[[], str]) -> "PopupInfo":
        return cls(title, content_fn)

    def text(self) -> str:
        """The text shown inside the popup."""
        if self.is_loading:
            return "Loading ..."
        return self.content_fn()


def overlay_popup(
    popup: Optional[PopupInfo], lines: Sequence[str], width: int
) -> List[str]:
    """Draw ``popup`` over ``lines``: a three-row box half as wide, a third down."""
    canvas = [_fit(line, width) for line in lines]
    if popup is None:
        return canvas
    height = len(canvas)
    x, y, box_width = width // 4, height // 3, width // 2
    if box_width < 2:
        return canvas
    inner = box_width - 2
    title = "Loading" if popup.is_loading else popup.title
    wrapped = textwrap.wrap(popup.text(), inner) if inner > 0 else []
    body = wrapped[0] if wrapped else ""
    box = [
        "┌" + title[:inner].ljust(inner, "─") + "┐",
        "│" + body.ljust(inner) + "│",
        "└" + "─" * inner + "┘",
    ]
    for row_offset, row in enumerate(box):
        row_index = y + row_offset
        if row_index >= height:
            break
        line = canvas[row_index]
        canvas[row_index] = line[:x] + row + line[x + box_width :]
    return canvas