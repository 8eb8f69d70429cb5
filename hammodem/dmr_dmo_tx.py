"""DMR direct-mode (simplex) transmitter: four-level FSK through a root raised cosine filter."""

from collections import deque
from collections.abc import Callable, Sequence

from hammodem.ax25tx import SampleSink
from hammodem.constants import DMR_FRAME_LENGTH_BYTES, DMR_RADIO_SYMBOL_LENGTH
from hammodem.dsp import FirInterpolatorQ15

# Root raised cosine, alpha 0.2, span 8 symbols, 5 samples per symbol.
RRC_0_2_FILTER = (
    0, 0, 0, 0, 850, 219, -720, -1548, -1795, -1172, 237, 1927, 3120, 3073, 1447,
    -1431, -4544, -6442, -5735, -1633, 5651, 14822, 23810, 30367, 32767, 30367,
    23810, 14822, 5651, -1633, -5735, -6442, -4544, -1431, 1447, 3073, 3120, 1927,
    237, -1172, -1795, -1548, -720, 219, 850,
)

DMR_LEVELA = 1362
DMR_LEVELB = 454
DMR_LEVELC = -454
DMR_LEVELD = -1362

_LEVELS = {0b11: DMR_LEVELA, 0b10: DMR_LEVELB, 0b00: DMR_LEVELC, 0b01: DMR_LEVELD}

PR_FILL = bytes((
    0x63, 0xEA, 0x00, 0x76, 0x6C, 0x76, 0xC4, 0x52, 0xC8, 0x78,
    0x09, 0x2D, 0xB8, 0x79, 0x27, 0x57, 0x9B, 0x31, 0xBC, 0x3E,
    0xEA, 0x45, 0xC3, 0x30, 0x49, 0x17, 0x93, 0xAE, 0x8B, 0x6D,
    0xA4, 0xA5, 0xAD, 0xA2, 0xF1, 0x35, 0xB5, 0x3C, 0x1E,
))

DMR_SYNC = 0x5F

BYTE_SAMPLES = 4 * DMR_RADIO_SYMBOL_LENGTH
DEFAULT_TX_DELAY = 240
MAX_TX_DELAY = 1200
DEFAULT_FIFO_SIZE = 1000


class DMRDMOTX:
    """Queues DMR bursts and modulates them, preceded by a sync preamble."""

    def __init__(
        self,
        sink: SampleSink,
        tx_active: Callable[[], bool],
        fifo_size: int = DEFAULT_FIFO_SIZE,
    ):
        if fifo_size < 1:
            raise ValueError("fifo_size must be positive")
        self._sink = sink
        self._tx_active = tx_active
        self._fifo_size = fifo_size
        self._fifo: deque[int] = deque()
        self._mod_filter = FirInterpolatorQ15(RRC_0_2_FILTER, DMR_RADIO_SYMBOL_LENGTH)
        self._buffer = b""
        self._ptr = 0
        self._tx_delay = DEFAULT_TX_DELAY

    @property
    def pending(self) -> int:
        """Bytes taken from the queue but not yet modulated."""
        return len(self._buffer) - self._ptr

    def write_data(self, data: Sequence[int]) -> None:
        """Queue one burst: a control byte followed by a 33 byte frame.

        Raises ValueError for a wrong length and OverflowError when the queue is full.
        """
        if len(data) != DMR_FRAME_LENGTH_BYTES + 1:
            raise ValueError(f"a burst must be {DMR_FRAME_LENGTH_BYTES + 1} bytes long")
        if self._fifo_size - len(self._fifo) < DMR_FRAME_LENGTH_BYTES:
            raise OverflowError("transmit queue is full")
        self._fifo.extend(b & 0xFF for b in data[1:])

    def process(self) -> None:
        """Load the next burst or preamble when idle, then modulate what fits the sink."""
        if not self._buffer and self._fifo:
            if not self._tx_active():
                self._buffer = bytes([DMR_SYNC]) * self._tx_delay
            else:
                frame = bytes(self._fifo.popleft() for _ in range(DMR_FRAME_LENGTH_BYTES))
                self._buffer = frame + PR_FILL
            self._ptr = 0

        if not self._buffer:
            return

        space = self._sink.space
        while space > BYTE_SAMPLES:
            byte = self._buffer[self._ptr]
            self._ptr += 1
            self._write_byte(byte)
            space -= BYTE_SAMPLES

            if self._ptr >= len(self._buffer):
                self._buffer = b""
                self._ptr = 0
                return

    def set_tx_delay(self, delay: int) -> None:
        """Set the extra preamble in 10 ms units on top of the fixed 500 ms."""
        if not 0 <= delay <= 0xFF:
            raise ValueError("delay must be between 0 and 255")
        self._tx_delay = min(600 + delay * 12, MAX_TX_DELAY)

    def space(self) -> int:
        """Number of further bursts the queue can take."""
        return (self._fifo_size - len(self._fifo)) // (DMR_FRAME_LENGTH_BYTES + 2)

    def _write_byte(self, byte: int) -> None:
        symbols = [_LEVELS[(byte >> shift) & 0b11] for shift in (6, 4, 2, 0)]
        self._sink.write(self._mod_filter.process(symbols))