from __future__ import annotations

import re
from collections.abc import Iterator

_LINE_BREAK = re.compile(r"\r?\n")


class LineReassembler:
    """
    Turns arbitrarily chunked serial text back into whole lines.

    A chunk may end mid-line; the trailing fragment is held until the next
    chunk completes it. End of stream is a transport event, so nothing is
    flushed automatically; call flush() when the link closes.
    """

    def __init__(self) -> None:
        self._pending = ""

    # ---------------------------------------- #

    @property
    def pending(self) -> str:
        return self._pending

    # ---------------------------------------- #

    def feed(self, chunk: str) -> Iterator[str]:
        self._pending += chunk
        # Buffer is updated before the caller starts iterating.
        *lines, self._pending = _LINE_BREAK.split(self._pending)
        return iter(lines)

    # ---------------------------------------- #

    def flush(self) -> str | None:
        rest, self._pending = self._pending, ""
        return rest or None

    # ---------------------------------------- #

    def reset(self) -> None:
        self._pending = ""
