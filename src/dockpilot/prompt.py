"""Line-oriented keystroke buffer for the action menu and the text prompts."""

from typing import Optional


class InputBuffer:
    """Append-only text buffer with backspace; Enter flushes it."""

    def __init__(self, text: str = ""):
        self._chars = list(text)

    @property
    def text(self) -> str:
        return "".join(self._chars)

    def __len__(self) -> int:
        return len(self._chars)

    def __bool__(self) -> bool:
        return bool(self._chars)

    def __repr__(self) -> str:
        return f"InputBuffer({self.text!r})"

    def __eq__(self, other) -> bool:
        if isinstance(other, InputBuffer):
            return self._chars == other._chars
        return NotImplemented

    def append(self, char: str) -> None:
        self._chars.append(char)

    def backspace(self) -> bool:
        """Remove the last character. Returns False if there was nothing to remove."""
        if not self._chars:
            return False
        self._chars.pop()
        return True

    def flush(self) -> str:
        text = self.text
        self._chars.clear()
        return text

    def replace(self, text: str) -> None:
        self._chars = list(text)


def command_letter(text: str) -> Optional[str]:
    """The action menu only looks at the first character of what was typed."""
    if not text:
        return None
    return text[0].lower()
