"""Unit tests for LineAssembler framing."""

import random

import pytest

from rn2483.core.line_assembler import LineAssembler


STREAM = (
    b"RN2483 1.0.5 Oct 31 2018 15:06:52\r\n"
    b"ok\r\n"
    b"\r\n"
    b"radio_rx  48656C6C6F\r\n"
    b"4294967245\n"
    b"radio_tx_ok\r\n"
)

EXPECTED = [
    "RN2483 1.0.5 Oct 31 2018 15:06:52",
    "ok",
    "radio_rx  48656C6C6F",
    "4294967245",
    "radio_tx_ok",
]


def feed_chunks(assembler, data, boundaries):
    lines = []
    start = 0
    for end in boundaries + [len(data)]:
        lines.extend(assembler.feed(data[start:end]))
        start = end
    return lines


class TestLineAssemblerFeed:
    """Test LineAssembler.feed()."""

    def test_single_complete_line(self):
        """Test a full CRLF-terminated line is emitted stripped."""
        assembler = LineAssembler()

        assert assembler.feed(b"ok\r\n") == ["ok"]
        assert assembler.pending == b""

    def test_partial_line_is_held(self):
        """Test bytes without a newline are buffered, not emitted."""
        assembler = LineAssembler()

        assert assembler.feed(b"RN2483 1.0") == []
        assert assembler.pending == b"RN2483 1.0"
        assert assembler.feed(b".5\r\n") == ["RN2483 1.0.5"]

    def test_multiple_lines_in_one_chunk(self):
        """Test every line in a chunk is emitted in order."""
        assembler = LineAssembler()

        assert assembler.feed(b"868000000\r\nok\r\nradio_") == ["868000000", "ok"]
        assert assembler.pending == b"radio_"

    def test_empty_lines_dropped(self):
        """Test blank and whitespace-only lines are not emitted."""
        assembler = LineAssembler()

        assert assembler.feed(b"\r\n  \r\n\nok\r\n") == ["ok"]

    def test_bare_lf_terminator(self):
        """Test LF without CR also ends a line."""
        assembler = LineAssembler()

        assert assembler.feed(b"invalid_param\n") == ["invalid_param"]

    def test_cr_split_from_lf(self):
        """Test a CR at the end of one chunk and LF in the next."""
        assembler = LineAssembler()

        assert assembler.feed(b"ok\r") == []
        assert assembler.feed(b"\n") == ["ok"]

    def test_multibyte_character_split_across_chunks(self):
        """Test UTF-8 sequences split across reads decode intact."""
        assembler = LineAssembler()
        data = "température\r\n".encode('utf-8')
        split = data.index(b"\xa9")

        assert assembler.feed(data[:split]) == []
        assert assembler.feed(data[split:]) == ["température"]

    def test_invalid_bytes_replaced(self):
        """Test undecodable bytes do not raise."""
        assembler = LineAssembler()

        lines = assembler.feed(b"\xff\xfeok\r\n")

        assert len(lines) == 1
        assert lines[0].endswith("ok")


class TestLineAssemblerChunking:
    """Chunk boundaries must not change the emitted lines."""

    @pytest.mark.parametrize("boundary", range(1, len(STREAM)))
    def test_every_single_split_point(self, boundary):
        """Test splitting the stream at any single offset."""
        assert feed_chunks(LineAssembler(), STREAM, [boundary]) == EXPECTED

    def test_byte_at_a_time(self):
        """Test feeding one byte per call."""
        assert feed_chunks(LineAssembler(), STREAM, list(range(1, len(STREAM)))) == EXPECTED

    def test_random_chunkings(self):
        """Test many random chunkings reproduce the content with empty lines removed."""
        rng = random.Random(2483)
        for _ in range(200):
            count = rng.randint(0, 12)
            boundaries = sorted(rng.sample(range(1, len(STREAM)), count))
            lines = feed_chunks(LineAssembler(), STREAM, boundaries)

            assert lines == EXPECTED
            assert "\r\n".join(lines) + "\r\n" == "\r\n".join(EXPECTED) + "\r\n"


class TestLineAssemblerReset:
    """Test reset() and flush()."""

    def test_reset_discards_partial(self):
        """Test reset drops the incomplete tail."""
        assembler = LineAssembler()
        assembler.feed(b"garbage before open")

        assembler.reset()

        assert assembler.pending == b""
        assert assembler.feed(b"ok\r\n") == ["ok"]

    def test_flush_keeps_partial(self):
        """Test flush leaves the tail buffered."""
        assembler = LineAssembler()
        assembler.feed(b"radio_tx")

        assembler.flush()

        assert assembler.pending == b"radio_tx"
        assert assembler.feed(b"_ok\r\n") == ["radio_tx_ok"]
