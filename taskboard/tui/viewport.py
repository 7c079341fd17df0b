from __future__ import annotations

from rich.text import Text


class Viewport:
    """A fixed-size window over a block of styled lines.

    While the window sits at the bottom it follows new content, like a
    tailing log; scrolling up stops that until the bottom is reached again.
    """

    def __init__(self, width: int = 0, height: int = 0, placeholder: str = "") -> None:
        self.width = width
        self.height = height
        self.offset = 0
        self._lines: list[Text] = [Text(placeholder)] if placeholder else []

    @property
    def max_offset(self) -> int:
        return max(len(self._lines) - self.height, 0)

    @property
    def at_bottom(self) -> bool:
        return self.offset >= self.max_offset

    def resize(self, width: int, height: int) -> None:
        follow = self.at_bottom
        self.width = max(width, 1)
        self.height = max(height, 1)
        self.offset = self.max_offset if follow else min(self.offset, self.max_offset)

    def set_content(self, content: Text, *, reset: bool = False) -> None:
        follow = self.at_bottom and not reset
        self._lines = list(content.split("\n", allow_blank=True))
        if reset:
            self.offset = 0
        elif follow:
            self.offset = self.max_offset
        else:
            self.offset = min(self.offset, self.max_offset)

    def scroll(self, delta: int) -> None:
        self.offset = min(max(self.offset + delta, 0), self.max_offset)

    def page_up(self) -> None:
        self.scroll(-self.height)

    def page_down(self) -> None:
        self.scroll(self.height)

    def home(self) -> None:
        self.offset = 0

    def end(self) -> None:
        self.offset = self.max_offset

    def lines(self) -> list[Text]:
        """Exactly ``height`` lines, cropped to ``width``."""
        window = []
        for line in self._lines[self.offset : self.offset + self.height]:
            line = line.copy()
            line.truncate(self.width, overflow="ellipsis")
            window.append(line)
        while len(window) < self.height:
            window.append(Text())
        return window
