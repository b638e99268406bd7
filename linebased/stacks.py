"""
Bookkeeping stacks used by the expansion engine.

- CallStack: template calls being expanded (recursion detection, provenance)
- IncludeStack: files currently open (include cycle detection)
- DecoderStack: one tokenizer per open file, top is read next
- PendingQueue: expanded expressions waiting to be returned
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO

from .decoder import Decoder
from .expression import Expanded


class CallStack:
    """Template calls in progress, outermost first, with an O(1) active-name map."""

    def __init__(self) -> None:
        self._frames: list[Expanded] = []
        self._active: dict[str, bool] = {}

    def __len__(self) -> int:
        return len(self._frames)

    def is_active(self, name: str) -> bool:
        return self._active.get(name, False)

    def push(self, frame: Expanded) -> bool:
        """Push frame; return False if its name was already active.

        The frame is pushed either way so a recursion report shows the full chain.
        """
        self._frames.append(frame)
        initial = not self._active.get(frame.name, False)
        self._active[frame.name] = True
        return initial

    def pop(self) -> Expanded:
        frame = self._frames.pop()  # IndexError on empty stack
        self._active.pop(frame.name, None)
        return frame

    def frames(self) -> tuple[Expanded, ...]:
        return tuple(self._frames)

    @contextmanager
    def entered(self, frame: Expanded) -> Iterator[bool]:
        """Push frame for the duration of the block; yields push()'s result."""
        initial = self.push(frame)
        try:
            yield initial
        finally:
            self.pop()


class IncludeStack:
    """Names of the files currently open, from the entry file inward."""

    def __init__(self, names: list[str] | None = None) -> None:
        self._names: list[str] = list(names or [])

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def push(self, name: str) -> bool:
        if name in self._names:
            return False
        self._names.append(name)
        return True

    def pop(self) -> None:
        if self._names:
            self._names.pop()

    def cycle(self, next_name: str) -> str:
        """Render the chain that reopening next_name would create."""
        return " -> ".join([*self._names, next_name])


@dataclass(slots=True)
class DecoderFrame:
    decoder: Decoder
    file: str
    handle: IO[str] | None = None

    def close(self) -> None:
        if self.handle is not None:
            self.handle.close()
            self.handle = None


class DecoderStack:
    """Open tokenizers; the last frame is the current file."""

    def __init__(self) -> None:
        self._frames: list[DecoderFrame] = []

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)

    def push(self, frame: DecoderFrame) -> None:
        self._frames.append(frame)

    def top(self) -> DecoderFrame:
        return self._frames[-1]

    def pop(self) -> DecoderFrame:
        frame = self._frames.pop()
        frame.close()
        return frame

    def close(self) -> None:
        while self._frames:
            self.pop()


class PendingQueue:
    """FIFO of expanded expressions not yet returned."""

    def __init__(self) -> None:
        self._items: deque[Expanded] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def extend(self, items: list[Expanded]) -> None:
        self._items.extend(items)

    def popleft(self) -> Expanded:
        return self._items.popleft()
