"""Single AX.25 1200 baud AFSK demodulator: delay-line detector, PLL and HDLC deframer."""

import copy
from collections import deque
from collections.abc import Iterable
from enum import Enum

from hammodem.ax25frame import AX25Frame
from hammodem.ax25twist import AX25Twist
from hammodem.constants import (
    AX25_FRAME_ABORT,
    AX25_FRAME_END,
    AX25_MAX_ONES,
    AX25_MIN_FRAME_LENGTH,
)
from hammodem.dsp import FirFilterF32, FirFilterQ15

SAMPLE_RATE = 24000.0
SYMBOL_RATE = 1200.0

DELAY_LEN = 11

SAMPLES_PER_SYMBOL = SAMPLE_RATE / SYMBOL_RATE
PLL_LIMIT = SAMPLES_PER_SYMBOL / 2.0

LPF_FILTER_COEFFS = (
    -2, -8, -17, -28, -40, -47, -47, -34,
    -5, 46, 122, 224, 354, 510, 689, 885,
    1092, 1302, 1506, 1693, 1856, 1987, 2077, 2124,
    2124, 2077, 1987, 1856, 1693, 1506, 1302, 1092,
    885, 689, 510, 354, 224, 122, 46, -5,
    -34, -47, -47, -40, -28, -17, -8, -2,
)

# Lock low-pass filter taps (80 Hz Bessel, fourth order).
PLL_LOCK_B = (1.077063e-03, 4.308253e-03, 6.462379e-03, 4.308253e-03, 1.077063e-03)
PLL_LOCK_A = (1.000000e00, -2.774567e00, 2.962960e00, -1.437990e00, 2.668296e-01)

# 64 Hz loop filter.
PLL_FILTER_COEFFS = (
    3.196252e-02, 1.204223e-01, 2.176819e-01, 2.598666e-01,
    2.176819e-01, 1.204223e-01, 3.196252e-02,
)

DCD_ON_JITTER = SAMPLES_PER_SYMBOL * 0.03
DCD_OFF_JITTER = SAMPLES_PER_SYMBOL * 0.15


class _HdlcState(Enum):
    IDLE = 0
    SYNC = 1
    RECEIVE = 2


class AX25Demodulator:
    """Turns blocks of Q15 audio samples into checked AX.25 frames."""

    def __init__(self, twist: int):
        self._frame = AX25Frame()
        self._twist = AX25Twist(twist)
        self._lpf = FirFilterQ15(LPF_FILTER_COEFFS)
        self._delay_line: deque[bool] = deque([False] * DELAY_LEN)
        self._nrzi_state = False
        self._pll_filter = FirFilterF32(PLL_FILTER_COEFFS)
        self._pll_last = False
        self._pll_bits = 1
        self._pll_count = 0.0
        self._pll_jitter = 0.0
        self._pll_dcd = False
        self._iir_history = [0.0] * len(PLL_LOCK_A)
        self._hdlc_ones = 0
        self._hdlc_flag = False
        self._hdlc_buffer = 0
        self._hdlc_bits = 0
        self._hdlc_state = _HdlcState.IDLE

    @property
    def twist(self) -> int:
        return self._twist.twist

    def process(self, samples: Iterable[int]) -> AX25Frame | None:
        """Demodulate a block; return the first frame completed in it, if any.

        The returned frame still carries its two checksum bytes and has ``fcs`` set.
        """
        transitions = []
        for sample in self._twist.process(samples):
            level = sample >= 0
            delayed = self._delay(level)
            transitions.append(1 if level != delayed else -1)

        result = None
        for value in self._lpf.process(transitions):
            bit = value >= 0
            if not self._pll(bit):
                continue
            complete = self._hdlc(self._nrzi(bit))
            # A block is too short to hold more than one frame end.
            if complete and result is None:
                result = copy.deepcopy(self._frame)
                self._frame.clear()
        return result

    def set_twist(self, twist: int) -> None:
        """Select another twist filter setting."""
        self._twist.set_twist(twist)

    def is_dcd(self) -> bool:
        """Data carrier detect, with hysteresis on the PLL jitter."""
        if self._pll_jitter <= DCD_ON_JITTER:
            self._pll_dcd = True
        elif self._pll_jitter >= DCD_OFF_JITTER:
            self._pll_dcd = False
        return self._pll_dcd

    def _delay(self, level: bool) -> bool:
        delayed = self._delay_line.popleft()
        self._delay_line.append(level)
        return delayed

    def _nrzi(self, bit: bool) -> bool:
        result = bit == self._nrzi_state
        self._nrzi_state = bit
        return result

    def _pll(self, bit: bool) -> bool:
        sample = False

        if bit != self._pll_last or self._pll_bits > 16:
            self._pll_last = bit

            if self._pll_count > PLL_LIMIT:
                self._pll_count -= SAMPLES_PER_SYMBOL

            adjust = 5.0 if self._pll_bits > 16 else 0.0
            offset = self._pll_count / self._pll_bits
            (jitter,) = self._pll_filter.process((offset,))

            self._pll_jitter = self._iir(adjust + abs(offset))

            self._pll_count -= jitter / 2.0
            self._pll_bits = 1
        elif self._pll_count > PLL_LIMIT:
            sample = True
            self._pll_count -= SAMPLES_PER_SYMBOL
            self._pll_bits += 1

        self._pll_count += 1.0
        return sample

    def _iir(self, value: float) -> float:
        history = self._iir_history
        history.pop()
        history.insert(0, value)
        history[0] -= sum(a * h for a, h in zip(PLL_LOCK_A[1:], history[1:]))
        return sum(b * h for b, h in zip(PLL_LOCK_B, history))

    def _append(self, byte: int) -> None:
        try:
            self._frame.append(byte)
        except OverflowError:
            pass

    def _hdlc(self, bit: bool) -> bool:
        if self._hdlc_ones == AX25_MAX_ONES:
            if bit:
                self._hdlc_flag = True
            else:
                # A stuffed zero: drop it.
                self._hdlc_flag = False
                self._hdlc_ones = 0
                return False

        self._hdlc_buffer = (self._hdlc_buffer >> 1) | (0x80 if bit else 0)
        self._hdlc_bits += 1

        self._hdlc_ones = self._hdlc_ones + 1 if bit else 0

        if self._hdlc_flag:
            result = False
            if self._hdlc_buffer == AX25_FRAME_END:
                if len(self._frame) >= AX25_MIN_FRAME_LENGTH:
                    result = self._frame.check_crc()
                    if not result:
                        self._frame.clear()
                else:
                    self._frame.clear()
                self._hdlc_state = _HdlcState.SYNC
                self._hdlc_flag = False
                self._hdlc_bits = 0
            elif self._hdlc_buffer == AX25_FRAME_ABORT:
                self._frame.clear()
                self._hdlc_state = _HdlcState.IDLE
                self._hdlc_flag = False
                self._hdlc_bits = 0
            return result

        if self._hdlc_state is not _HdlcState.IDLE and self._hdlc_bits == 8:
            self._hdlc_state = _HdlcState.RECEIVE
            self._append(self._hdlc_buffer)
            self._hdlc_bits = 0

        return False