"""Line framing for the serial byte stream.

Reassembles the arbitrarily fragmented chunks returned by the transport
into complete, trimmed text lines.
"""

from typing import List


class LineAssembler:
    """Splits a byte stream into lines on LF or CRLF boundaries.

    Bytes are accumulated until a ``\\n`` arrives. Each complete line is
    decoded, stripped of surrounding whitespace (including the optional
    ``\\r``) and emitted unless empty. The trailing partial line is kept
    across calls, so the output does not depend on how the stream was
    chunked.

    Example:
        >>> assembler = LineAssembler()
        >>> assembler.feed(b"RN2483 1.0.5\\r\\no")
        ['RN2483 1.0.5']
        >>> assembler.feed(b"k\\r\\n")
        ['ok']
    """

    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = encoding
        self._buffer = bytearray()

    def feed(self, data: bytes) -> List[str]:
        """Append bytes and return every line they complete, in order."""
        self._buffer.extend(data)
        if b'\n' not in data:
            return []

        segments = self._buffer.split(b'\n')
        self._buffer = bytearray(segments.pop())

        lines = []
        for segment in segments:
            line = segment.decode(self.encoding, errors='replace').strip()
            if line:
                lines.append(line)
        return lines

    def flush(self) -> None:
        """Emit nothing; the partial tail stays buffered for the next feed."""
        return None

    def reset(self) -> None:
        """Discard the partial tail."""
        self._buffer.clear()

    @property
    def pending(self) -> bytes:
        """Bytes of the incomplete trailing line."""
        return bytes(self._buffer)
