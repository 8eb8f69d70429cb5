"""AX.25 receiver: band-pass filter, three demodulators and p-persistence channel access."""

from collections.abc import Iterable

from hammodem.ax25demod import AX25Demodulator
from hammodem.dsp import FirFilterQ15

# 1100-2300 Hz band-pass, Hann window, 130 taps.
FILTER_COEFFS = (
    5, 12, 18, 21, 19, 11, -2, -15, -25, -27,
    -21, -11, -3, -5, -19, -43, -69, -83, -73, -35,
    27, 98, 155, 180, 163, 109, 39, -20, -45, -26,
    23, 74, 89, 39, -81, -247, -407, -501, -480, -334,
    -92, 175, 388, 479, 429, 275, 99, 5, 68, 298,
    626, 913, 994, 740, 115, -791, -1770, -2544, -2847, -2509,
    -1527, -76, 1518, 2875, 3653, 3653, 2875, 1518, -76, -1527,
    -2509, -2847, -2544, -1770, -791, 115, 740, 994, 913, 626,
    298, 68, 5, 99, 275, 429, 479, 388, 175, -92,
    -334, -480, -501, -407, -247, -81, 39, 89, 74, 23,
    -26, -45, -20, 39, 109, 163, 180, 155, 98, 27,
    -35, -73, -83, -69, -43, -19, -5, -3, -11, -21,
    -27, -25, -15, -2, 11, 19, 21, 18, 12, 5,
)

SAMPLES_PER_SLOT_UNIT = 240
TWIST_SPREAD = 3


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be between 0 and 255")


class AX25RX:
    """Receives AX.25 frames and decides when the channel may be used."""

    def __init__(self):
        self._filter = FirFilterQ15(FILTER_COEFFS)
        self._demods = (AX25Demodulator(3), AX25Demodulator(6), AX25Demodulator(9))
        self._last_fcs = 0
        self._count = 0
        self._slot_time = 30
        self._slot_count = 0
        self._p_persist = 128
        self._dcd = False
        self._can_tx = False
        self._x = 1
        self._a = 0xB7
        self._b = 0x73
        self._c = 0xF6
        self._mix()

    @property
    def dcd(self) -> bool:
        """Whether a carrier was detected at the last slot boundary."""
        return self._dcd

    def samples(self, samples: Iterable[int]) -> list[bytes]:
        """Process a block of Q15 samples; return the payloads received, without FCS."""
        output = self._filter.process(samples)
        self._count += 1

        received = []
        for demod in self._demods:
            frame = demod.process(output)
            if frame is None:
                continue
            if frame.fcs != self._last_fcs or self._count > 2:
                self._last_fcs = frame.fcs
                self._count = 0
                received.append(frame.data[:-2])

        self._slot_count += len(output)
        if self._slot_count >= self._slot_time:
            self._slot_count = 0
            # Every demodulator updates its latched carrier state.
            carriers = [demod.is_dcd() for demod in self._demods]
            if any(carriers):
                self._dcd = True
                self._can_tx = False
            else:
                self._dcd = False
                self._can_tx = self._p_persist >= self._rand()

        return received

    def can_tx(self) -> bool:
        """Whether the last slot decision allows transmitting."""
        return self._can_tx

    def set_params(self, twist: int, slot_time: int, p_persist: int) -> None:
        """Set the centre twist, the slot time in 10 ms units and the persistence value."""
        _check_byte("slot_time", slot_time)
        _check_byte("p_persist", p_persist)
        low, mid, high = self._demods
        for demod, value in ((low, twist - TWIST_SPREAD), (mid, twist), (high, twist + TWIST_SPREAD)):
            demod.set_twist(value)
        self._slot_time = slot_time * SAMPLES_PER_SLOT_UNIT
        self._p_persist = p_persist

    def _mix(self) -> None:
        self._a = self._a ^ self._c ^ self._x
        self._b = (self._b + self._a) & 0xFF
        self._c = ((self._c + (self._b >> 1)) ^ self._a) & 0xFF

    def _rand(self) -> int:
        """X ABC 8-bit pseudo-random generator."""
        self._x = (self._x + 1) & 0xFF
        self._mix()
        return self._c