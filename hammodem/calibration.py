"""Calibration helpers: RSSI statistics, NXDN and POCSAG test patterns, FM test tones."""

import math
import struct
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from hammodem.ax25tx import SampleSink
from hammodem.constants import NXDN_FRAME_LENGTH_BYTES


class FrameTransmitter(Protocol):
    """A queued frame transmitter such as the NXDN one."""

    def process(self) -> None: ...

    def space(self) -> int: ...

    def write_data(self, data: Sequence[int]) -> None: ...


def _switch_value(data: Sequence[int]) -> bool:
    if len(data) != 1:
        raise ValueError("a calibration switch is exactly one byte")
    return data[0] == 1


# ---------------------------------------------------------------------------
# RSSI


RSSI_REPORT_SAMPLES = 24000


class CalRSSI:
    """Collects RSSI readings and reports max, min and average once a second."""

    def __init__(self):
        self._reset()

    def _reset(self) -> None:
        self._count = 0
        self._accum = 0
        self._min = 0xFFFF
        self._max = 0x0000

    def samples(self, rssi: Iterable[int]) -> list[bytes]:
        """Add readings; return the reports completed, each big-endian max, min, average."""
        reports = []
        for value in rssi:
            value &= 0xFFFF
            self._accum += value
            self._max = max(self._max, value)
            self._min = min(self._min, value)
            self._count += 1
            if self._count >= RSSI_REPORT_SAMPLES:
                average = self._accum // self._count
                reports.append(struct.pack(">HHH", self._max, self._min, average))
                self._reset()
        return reports


# ---------------------------------------------------------------------------
# NXDN


# NXDN 1031 Hz test pattern, RAN 1, unit ID 1, destination group 1, outbound.
_NXDN_COMMON = bytes((
    0x4C, 0xAA, 0xDE, 0x8B, 0x26, 0xE4, 0xF2, 0x82, 0x88,
    0xC6, 0x8A, 0x74, 0x29, 0xA4, 0xEC, 0xD0, 0x08, 0x22,
    0xCE, 0xA2, 0xFC, 0x01, 0x8C, 0xEC, 0xDA, 0x0A, 0xA0,
    0xEE, 0x8A, 0x7E, 0x2B, 0x26, 0xCC, 0xF8, 0x8A, 0x08,
))

NXDN_CAL1K: tuple[bytes, ...] = (
    bytes((0x00, 0xCD, 0xF5, 0x9D, 0x5D, 0x7C, 0xFA, 0x0A, 0x6E, 0x8A, 0x23, 0x56, 0xE8))
    + _NXDN_COMMON,
    bytes((0x00, 0xCD, 0xF5, 0x9D, 0x5D, 0x7C, 0x6D, 0xBB, 0x0E, 0xB3, 0xA4, 0x26, 0xA8))
    + _NXDN_COMMON,
    bytes((0x00, 0xCD, 0xF5, 0x9D, 0x5D, 0x76, 0x3A, 0x1B, 0x4A, 0x81, 0xA8, 0xE2, 0x80))
    + _NXDN_COMMON,
    bytes((0x00, 0xCD, 0xF5, 0x9D, 0x5D, 0x74, 0x28, 0x83, 0x02, 0xB0, 0x2D, 0x07, 0xE2))
    + _NXDN_COMMON,
)

assert all(len(frame) == NXDN_FRAME_LENGTH_BYTES + 1 for frame in NXDN_CAL1K)


class _NXDNState(Enum):
    IDLE = 0
    TX = 1


class CalNXDN:
    """Sends the NXDN 1031 Hz test pattern while switched on."""

    def __init__(self, transmitter: FrameTransmitter):
        self._tx = transmitter
        self._transmit = False
        self._state = _NXDNState.IDLE
        self._audio_seq = 0

    @property
    def active(self) -> bool:
        """Whether test frames are still being queued."""
        return self._state is _NXDNState.TX

    def process(self) -> None:
        """Run the transmitter and queue the next test frame when there is room."""
        self._tx.process()

        if self._tx.space() < 1:
            return

        if self._state is _NXDNState.TX:
            self._tx.write_data(NXDN_CAL1K[self._audio_seq])
            self._audio_seq = (self._audio_seq + 1) % len(NXDN_CAL1K)
            if not self._transmit:
                self._state = _NXDNState.IDLE
        else:
            self._audio_seq = 0

    def write(self, data: Sequence[int]) -> None:
        """Switch the pattern on with a single byte 1, off with any other single byte."""
        self._transmit = _switch_value(data)
        if self._transmit and self._state is _NXDNState.IDLE:
            self._state = _NXDNState.TX


# ---------------------------------------------------------------------------
# POCSAG


POCSAG_CAL_BYTE = 0xAA
POCSAG_MIN_SPACE = 165


class CalPOCSAG:
    """Sends an alternating bit pattern on the POCSAG transmitter while switched on."""

    def __init__(self, sink: SampleSink, write_byte: Callable[[int], None]):
        self._sink = sink
        self._write_byte = write_byte
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def process(self) -> None:
        """Send one pattern byte if switched on and the sink has room."""
        if not self._active:
            return
        if self._sink.space <= POCSAG_MIN_SPACE:
            return
        self._write_byte(POCSAG_CAL_BYTE)

    def write(self, data: Sequence[int]) -> None:
        """Switch the pattern on with a single byte 1, off with any other single byte."""
        self._active = _switch_value(data)


# ---------------------------------------------------------------------------
# FM


class FMCalState(Enum):
    """FM deviation calibration modes, named by the deviation in kHz."""

    FMCAL10K = "10k"
    FMCAL12K = "12.5k"
    FMCAL15K = "15k"
    FMCAL20K = "20k"
    FMCAL25K = "25k"
    FMCAL30K = "30k"


@dataclass(frozen=True)
class _Tone:
    frequency: int
    length: int
    increment: int


_TONES: dict[FMCalState, _Tone] = {
    FMCalState.FMCAL30K: _Tone(2495, 10, 223248821),
    FMCalState.FMCAL25K: _Tone(2079, 12, 186025772),
    FMCalState.FMCAL20K: _Tone(1633, 15, 146118367),
    FMCalState.FMCAL15K: _Tone(1247, 19, 111579672),
    FMCalState.FMCAL12K: _Tone(1039, 23, 93012886),
    FMCalState.FMCAL10K: _Tone(956, 25, 85541432),
}

FM_CAL_LEVEL = 128 * 12

_Q31_ONE = 1 << 31


def _sin_q31(arg: int) -> int:
    """Sine of a Q31 phase where the full range is one cycle."""
    phase = arg % _Q31_ONE
    value = round(math.sin(2.0 * math.pi * phase / _Q31_ONE) * _Q31_ONE)
    return max(-_Q31_ONE, min(_Q31_ONE - 1, value))


def _build_tone(tone: _Tone, level: int) -> tuple[int, ...]:
    samples = []
    arg = 0
    for _ in range(tone.length):
        value = (_sin_q31(arg) * level) >> 31
        samples.append(max(-32768, min(32767, value)))
        arg += tone.increment
    return tuple(samples)


class CalFM:
    """Sends a test tone whose frequency depends on the FM calibration mode."""

    def __init__(self, sink: SampleSink, level: int = FM_CAL_LEVEL):
        self._sink = sink
        self._level = level
        self._transmit = False
        self._frequency = 0
        self._tone: tuple[int, ...] = ()
        self._last_state: object = None

    @property
    def frequency(self) -> int:
        """Tone frequency in Hz, 0 when the mode has no tone."""
        return self._frequency

    @property
    def tone(self) -> tuple[int, ...]:
        """One period block of the current tone."""
        return self._tone

    def process(self, modem_state: object) -> None:
        """Update the tone for ``modem_state`` and send it while switched on."""
        if modem_state != self._last_state:
            entry = _TONES.get(modem_state) if isinstance(modem_state, FMCalState) else None
            if entry is None:
                self._frequency = 0
                return
            self._frequency = entry.frequency
            self._tone = _build_tone(entry, self._level)
            self._last_state = modem_state

        if not self._transmit or not self._tone:
            return

        length = len(self._tone)
        space = self._sink.space
        while space > length:
            self._sink.write(self._tone)
            space -= length

    def write(self, data: Sequence[int]) -> None:
        """Switch the tone on with a single byte 1, off with any other single byte."""
        self._transmit = _switch_value(data)