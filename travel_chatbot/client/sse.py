import codecs
import json
from typing import Any

from travel_chatbot.exceptions import TravelChatbotError

FRAME_SEPARATOR = "\n\n"
DATA_PREFIX = "data:"


class FrameDecodeError(TravelChatbotError):
    """A complete frame carried a payload that is not JSON."""


class SSEFrameDecoder:
    """
    Incremental decoder for ``data: <json>\\n\\n`` frames.

    Transport reads are not aligned with frames: one read may hold several
    frames, none, or a fragment of one (even half of a multi-byte character).
    Incomplete input stays buffered until the rest arrives.
    """

    def __init__(self):
        self._utf8 = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""

    @property
    def pending(self) -> str:
        return self._buffer

    def feed(self, chunk: bytes | str) -> list[dict[str, Any]]:
        if isinstance(chunk, bytes):
            chunk = self._utf8.decode(chunk)
        self._buffer += chunk.replace("\r\n", "\n")

        payloads = []
        while FRAME_SEPARATOR in self._buffer:
            frame, self._buffer = self._buffer.split(FRAME_SEPARATOR, 1)
            payload = self._parse_frame(frame)
            if payload is not None:
                payloads.append(payload)
        return payloads

    @staticmethod
    def _parse_frame(frame: str) -> dict[str, Any] | None:
        data_lines = [
            line[len(DATA_PREFIX):].removeprefix(" ")
            for line in frame.split("\n")
            if line.startswith(DATA_PREFIX)
        ]
        if not data_lines:
            return None  # comments, keep-alives, other fields
        data = "\n".join(data_lines)
        if data == "[DONE]":
            return None
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            raise FrameDecodeError(f"Malformed frame payload: {data[:80]!r}") from e
        if not isinstance(payload, dict):
            raise FrameDecodeError(f"Frame payload is not an object: {data[:80]!r}")
        return payload
