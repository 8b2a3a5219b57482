"""
In-memory output sink.

Collects whatever the engine writes so the rendered text can be
inspected after the fact, e.g. in tests or when the caller wants
both the return value and a sink-shaped object.
"""

from __future__ import annotations

from typing import Any, List, Optional


class StringResponse:

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self._chunks: List[str] = []
        self.ended = False

    def _coerce(self, chunk: Any) -> str:
        if isinstance(chunk, str):
            return chunk
        if isinstance(chunk, (bytes, bytearray)):
            return bytes(chunk).decode(self.encoding)
        return str(chunk)

    def write(self, chunk: Any) -> int:
        """
        Appends a chunk; bytes are decoded, anything else goes through ``str()``.

        Raises:
            ValueError: If the response was already ended
        """
        if self.ended:
            raise ValueError("write after end")
        text = self._coerce(chunk)
        self._chunks.append(text)
        return len(text)

    def end(self, chunk: Optional[Any] = None) -> None:
        if chunk is not None:
            self.write(chunk)
        self.ended = True

    @property
    def data(self) -> str:
        return "".join(self._chunks)

    @data.setter
    def data(self, data: str) -> None:
        self._chunks = [data]

    def __repr__(self) -> str:
        return f"StringResponse({len(self.data)} chars, ended={self.ended})"
