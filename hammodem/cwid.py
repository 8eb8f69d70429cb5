"""Morse code station identification transmitter."""

from collections.abc import Iterable

from hammodem.ax25tx import SampleSink

TONE = (
    0, 518, 1000, 1414, 1732, 1932, 2000, 1932, 1732, 1414, 1000, 518,
    0, -518, -1000, -1414, -1732, -1932, -2000, -1932, -1732, -1414, -1000, -518,
)
SILENCE = (0,) * len(TONE)

CYCLE_LENGTH = len(TONE)
DOT_LENGTH = 50

LEAD_BITS = 8
TRAIL_BITS = 5
MAX_BITS = 995

# Dots are "10", dashes "1110", each character followed by an extra "00".
SYMBOLS: dict[str, tuple[int, int]] = {
    "A": (0xB8000000, 8),
    "B": (0xEA800000, 12),
    "C": (0xEBA00000, 14),
    "D": (0xEA000000, 10),
    "E": (0x80000000, 4),
    "F": (0xAE800000, 12),
    "G": (0xEE800000, 12),
    "H": (0xAA000000, 10),
    "I": (0xA0000000, 6),
    "J": (0xBBB80000, 16),
    "K": (0xEB800000, 12),
    "L": (0xBA800000, 12),
    "M": (0xEE000000, 10),
    "N": (0xE8000000, 8),
    "O": (0xEEE00000, 14),
    "P": (0xBBA00000, 14),
    "Q": (0xEEB80000, 16),
    "R": (0xBA000000, 10),
    "S": (0xA8000000, 8),
    "T": (0xE0000000, 6),
    "U": (0xAE000000, 10),
    "V": (0xAB800000, 12),
    "W": (0xBB800000, 12),
    "X": (0xEAE00000, 14),
    "Y": (0xEBB80000, 16),
    "Z": (0xEEA00000, 14),
    "1": (0xBBBB8000, 20),
    "2": (0xAEEE0000, 18),
    "3": (0xABB80000, 16),
    "4": (0xAAE00000, 14),
    "5": (0xAA800000, 12),
    "6": (0xEAA00000, 14),
    "7": (0xEEA80000, 16),
    "8": (0xEEEA0000, 18),
    "9": (0xEEEE8000, 20),
    "0": (0xEEEEE000, 22),
    "/": (0xEAE80000, 16),
    "?": (0xAEEA0000, 18),
    ",": (0xEEAEE000, 22),
    "-": (0xEAAE0000, 18),
    "=": (0xEAB80000, 16),
    ".": (0xBAEB8000, 20),
    " ": (0x00000000, 4),
}


class CWIdTX:
    """Keys a tone on and off to send a message in Morse code."""

    def __init__(self, sink: SampleSink):
        self._sink = sink
        self._bits: list[bool] = []
        self._ptr = 0
        self._n = 0

    @property
    def bits(self) -> tuple[bool, ...]:
        """The keying pattern of the queued message, one entry per dot period."""
        return tuple(self._bits)

    @property
    def pending(self) -> int:
        """Dot periods not yet started."""
        return len(self._bits) - self._ptr

    def write(self, data: str | Iterable[int]) -> None:
        """Queue a message; characters without a Morse code are skipped.

        Raises ValueError when nothing in ``data`` can be sent or the message is too long.
        """
        self.reset()
        chars = data if isinstance(data, str) else map(chr, data)

        bits = [False] * LEAD_BITS
        for ch in chars:
            symbol = SYMBOLS.get(ch)
            if symbol is None:
                continue
            pattern, length = symbol
            for k in range(length):
                if len(bits) >= MAX_BITS:
                    raise ValueError("message is too long")
                bits.append(bool(pattern & (0x80000000 >> k)))

        if len(bits) == LEAD_BITS:
            raise ValueError("message holds no characters that can be sent")

        bits.extend([False] * TRAIL_BITS)
        self._bits = bits

    def process(self) -> None:
        """Send as many tone or silence cycles as the sink has room for."""
        if not self._bits:
            return

        space = self._sink.space
        while space > CYCLE_LENGTH:
            self._sink.write(TONE if self._bits[self._ptr] else SILENCE)
            space -= CYCLE_LENGTH

            self._n += 1
            if self._n >= DOT_LENGTH:
                self._ptr += 1
                self._n = 0

            if self._ptr >= len(self._bits):
                self.reset()
                return

    def reset(self) -> None:
        """Drop any queued message."""
        self._bits = []
        self._ptr = 0
        self._n = 0