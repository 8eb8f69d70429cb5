"""Fixed- and floating-point FIR filters and bit helpers used by the modem."""

from collections import deque
from collections.abc import Iterable, Sequence


def _saturate16(value: int) -> int:
    return max(-32768, min(32767, value))


def _wrap32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


class FirFilterQ15:
    """Streaming Q15 FIR filter with a 32-bit accumulator.

    Coefficients are stored time-reversed: the last coefficient weights the
    newest sample. Filter history survives coefficient changes of equal length.
    """

    def __init__(self, coeffs: Sequence[int]):
        self._coeffs: tuple[int, ...] = ()
        self._history: deque[int] = deque()
        self.coeffs = coeffs

    @property
    def coeffs(self) -> tuple[int, ...]:
        return self._coeffs

    @coeffs.setter
    def coeffs(self, coeffs: Sequence[int]) -> None:
        coeffs = tuple(int(c) for c in coeffs)
        if not coeffs:
            raise ValueError("a filter needs at least one coefficient")
        if len(coeffs) != len(self._coeffs):
            self._history = deque([0] * len(coeffs), maxlen=len(coeffs))
        self._coeffs = coeffs

    def reset(self) -> None:
        """Clear the filter history."""
        self._history = deque([0] * len(self._coeffs), maxlen=len(self._coeffs))

    def process(self, samples: Iterable[int]) -> list[int]:
        """Filter a block of samples and return the filtered block."""
        out = []
        for sample in samples:
            self._history.append(int(sample))
            acc = _wrap32(sum(h * c for h, c in zip(self._history, self._coeffs)))
            out.append(_saturate16(acc >> 15))
        return out


class FirFilterF32:
    """Streaming single-precision FIR filter, coefficients time-reversed."""

    def __init__(self, coeffs: Sequence[float]):
        self.coeffs = tuple(float(c) for c in coeffs)
        if not self.coeffs:
            raise ValueError("a filter needs at least one coefficient")
        self.reset()

    def reset(self) -> None:
        """Clear the filter history."""
        self._history = deque([0.0] * len(self.coeffs), maxlen=len(self.coeffs))

    def process(self, samples: Iterable[float]) -> list[float]:
        """Filter a block of samples and return the filtered block."""
        out = []
        for sample in samples:
            self._history.append(float(sample))
            out.append(sum(h * c for h, c in zip(self._history, self.coeffs)))
        return out


class FirInterpolatorQ15:
    """Q15 polyphase interpolating FIR filter producing ``factor`` outputs per input."""

    def __init__(self, coeffs: Sequence[int], factor: int):
        coeffs = tuple(int(c) for c in coeffs)
        if factor < 1:
            raise ValueError("interpolation factor must be positive")
        if not coeffs or len(coeffs) % factor:
            raise ValueError("coefficient count must be a non-zero multiple of the factor")
        self.coeffs = coeffs
        self.factor = factor
        self.phase_length = len(coeffs) // factor
        self.reset()

    def reset(self) -> None:
        """Clear the filter history."""
        self._history = deque([0] * self.phase_length, maxlen=self.phase_length)

    def process(self, samples: Iterable[int]) -> list[int]:
        """Interpolate a block of samples."""
        out = []
        step = self.factor
        for sample in samples:
            self._history.append(int(sample))
            for j in range(1, step + 1):
                phase = self.coeffs[step - j::step]
                acc = sum(h * c for h, c in zip(self._history, phase))
                out.append(_saturate16(acc >> 15))
        return out


def count_bits(value: int) -> int:
    """Number of set bits in a non-negative integer."""
    if value < 0:
        raise ValueError("count_bits needs a non-negative value")
    return bin(value).count("1")


def read_bit_msb(data: Sequence[int], index: int) -> bool:
    """Read bit ``index`` counting from the most significant bit of each byte."""
    return bool(data[index >> 3] & (0x80 >> (index & 7)))


def write_bit_msb(data: bytearray, index: int, bit: bool) -> None:
    """Set or clear bit ``index`` counting from the most significant bit of each byte."""
    mask = 0x80 >> (index & 7)
    if bit:
        data[index >> 3] |= mask
    else:
        data[index >> 3] &= ~mask & 0xFF


def read_bit_lsb(data: Sequence[int], index: int) -> bool:
    """Read bit ``index`` counting from the least significant bit of each byte."""
    return bool(data[index >> 3] & (0x01 << (index & 7)))