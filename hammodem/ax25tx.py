"""AX.25 1200 baud AFSK transmitter: HDLC framing, bit stuffing, NRZI and tone synthesis."""

from collections.abc import Callable, Iterable, Sequence
from typing import Protocol

from hammodem.ax25frame import AX25Frame
from hammodem.constants import (
    AX25_FRAME_END,
    AX25_FRAME_START,
    AX25_MAX_ONES,
    AX25_RADIO_SYMBOL_LENGTH,
)


class SampleSink(Protocol):
    """Where a transmitter sends its audio: free room in samples and a write call."""

    @property
    def space(self) -> int: ...

    def write(self, samples: Sequence[int]) -> None: ...


AUDIO_TABLE = (
    0, 214, 428, 641, 851, 1060, 1265, 1468, 1666, 1859, 2048, 2230, 2407, 2577, 2740, 2896,
    3043, 3182, 3313, 3434, 3546, 3649, 3741, 3823, 3895, 3955, 4006, 4045, 4073, 4089, 4095,
    4089, 4073, 4045, 4006, 3955, 3895, 3823, 3741, 3649, 3546, 3434, 3313, 3182, 3043, 2896,
    2740, 2577, 2407, 2230, 2048, 1859, 1666, 1468, 1265, 1060, 851, 641, 428, 214, 0, -214,
    -428, -641, -851, -1060, -1265, -1468, -1666, -1859, -2047, -2230, -2407, -2577, -2740,
    -2896, -3043, -3182, -3313, -3434, -3546, -3649, -3741, -3823, -3895, -3955, -4006, -4045,
    -4073, -4089, -4095, -4089, -4073, -4045, -4006, -3955, -3895, -3823, -3741, -3649, -3546,
    -3434, -3313, -3182, -3043, -2896, -2740, -2577, -2407, -2230, -2047, -1859, -1666, -1468,
    -1265, -1060, -851, -641, -428, -214,
)

MARK_STEP = 6
SPACE_STEP = 11
TX_DELAY_UNIT_BITS = 12
DEFAULT_TX_DELAY_BITS = 360


def _flag_bits(flag: int) -> list[bool]:
    return [bool(flag & (0x80 >> i)) for i in range(8)]


class AX25TX:
    """Queues one AX.25 frame at a time and plays it out as audio samples."""

    def __init__(
        self,
        sink: SampleSink,
        can_tx: Callable[[], bool] | None = None,
        duplex: bool = False,
    ):
        self._sink = sink
        self._can_tx = can_tx if can_tx is not None else (lambda: True)
        self.duplex = duplex
        self._bits: list[bool] = []
        self._ptr = 0
        self._tx_delay = DEFAULT_TX_DELAY_BITS
        self._table_ptr = 0
        self._nrzi_state = False

    @property
    def bits(self) -> tuple[bool, ...]:
        """The encoded line bits of the queued frame, preamble included."""
        return tuple(self._bits)

    @property
    def pending(self) -> int:
        """Number of queued bits not yet sent."""
        return len(self._bits) - self._ptr

    def write_data(self, data: Iterable[int]) -> None:
        """Frame ``data`` with its FCS and queue it, replacing anything queued."""
        frame = AX25Frame(data)
        frame.add_crc()

        self._ptr = 0
        self._nrzi_state = False
        self._table_ptr = 0

        encode = self._nrzi
        bits = [encode(False) for _ in range(self._tx_delay)]
        bits.extend(encode(b) for b in _flag_bits(AX25_FRAME_START))

        ones = 0
        for byte in frame.data:
            for i in range(8):
                bit = bool(byte & (1 << i))
                bits.append(encode(bit))
                if bit:
                    ones += 1
                    if ones == AX25_MAX_ONES:
                        bits.append(encode(False))
                        ones = 0
                else:
                    ones = 0

        bits.extend(encode(b) for b in _flag_bits(AX25_FRAME_END))
        self._bits = bits

    def process(self) -> None:
        """Send as many queued bits as the sink has room for."""
        if not self._bits:
            return

        if not self.duplex and self._ptr == 0 and not self._can_tx():
            return

        space = self._sink.space
        while space > AX25_RADIO_SYMBOL_LENGTH:
            bit = self._bits[self._ptr]
            self._ptr += 1
            self._write_bit(bit)
            space -= AX25_RADIO_SYMBOL_LENGTH

            if self._ptr >= len(self._bits):
                self._bits = []
                self._ptr = 0
                return

    def set_tx_delay(self, delay: int) -> None:
        """Set the preamble length in units of 10 ms."""
        if not 0 <= delay <= 0xFF:
            raise ValueError("delay must be between 0 and 255")
        self._tx_delay = delay * TX_DELAY_UNIT_BITS

    def space(self) -> int:
        """255 when a new frame may be queued, 0 while one is being sent."""
        return 255 if not self._bits else 0

    def _write_bit(self, bit: bool) -> None:
        buffer = []
        for _ in range(AX25_RADIO_SYMBOL_LENGTH):
            value = AUDIO_TABLE[self._table_ptr]
            if bit:
                # De-emphasise the lower frequency by 6 dB.
                value >>= 2
                self._table_ptr += MARK_STEP
            else:
                self._table_ptr += SPACE_STEP
            buffer.append(value >> 1)
            if self._table_ptr >= len(AUDIO_TABLE):
                self._table_ptr -= len(AUDIO_TABLE)
        self._sink.write(buffer)

    def _nrzi(self, bit: bool) -> bool:
        if not bit:
            self._nrzi_state = not self._nrzi_state
        return self._nrzi_state