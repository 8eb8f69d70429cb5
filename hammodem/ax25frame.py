"""AX.25 frame buffer with the HDLC CCITT frame check sequence."""

from collections.abc import Iterable

from hammodem.constants import AX25_MAX_PACKET_LEN


def _build_ccitt_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = (crc >> 1) ^ 0x8408 if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


CCITT_TABLE = _build_ccitt_table()


def _crc16(data: Iterable[int]) -> int:
    crc = 0xFFFF
    for byte in data:
        crc = (crc >> 8) ^ CCITT_TABLE[(crc ^ byte) & 0xFF]
    return ~crc & 0xFFFF


class AX25Frame:
    """A frame of at most AX25_MAX_PACKET_LEN bytes, with its FCS once known."""

    def __init__(self, data: Iterable[int] = b""):
        self._data = bytearray(bytes(data)[: AX25_MAX_PACKET_LEN - 2])
        self.fcs = 0

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"AX25Frame({bytes(self._data)!r}, fcs=0x{self.fcs:04X})"

    @property
    def data(self) -> bytes:
        return bytes(self._data)

    def clear(self) -> None:
        """Drop all bytes from the frame."""
        self._data.clear()

    def append(self, c: int) -> None:
        """Append one byte; raises OverflowError when the frame is full."""
        if len(self._data) >= AX25_MAX_PACKET_LEN:
            raise OverflowError("AX.25 frame is full")
        self._data.append(c & 0xFF)

    def check_crc(self) -> bool:
        """Check the trailing two-byte FCS; on success store it in ``fcs``."""
        if len(self._data) < 2:
            raise ValueError("frame too short to hold a checksum")
        crc = _crc16(self._data[:-2])
        if self._data[-2] == crc & 0xFF and self._data[-1] == crc >> 8:
            self.fcs = crc
            return True
        return False

    def add_crc(self) -> None:
        """Compute the FCS, store it in ``fcs`` and append it low byte first."""
        if len(self._data) > AX25_MAX_PACKET_LEN - 2:
            raise OverflowError("no room for the checksum")
        crc = _crc16(self._data)
        self.fcs = crc
        self._data += bytes((crc & 0xFF, crc >> 8))