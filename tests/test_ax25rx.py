import math

import pytest

from hammodem.ax25frame import AX25Frame
from hammodem.ax25rx import AX25RX

BLOCK = 20


def _byte_bits(byte):
    return [(byte >> i) & 1 for i in range(8)]


def _hdlc_bits(frame_bytes):
    flag = _byte_bits(0x7E)
    bits = [0] * 64 + flag + flag
    ones = 0
    for byte in frame_bytes:
        for bit in _byte_bits(byte):
            bits.append(bit)
            if bit:
                ones += 1
                if ones == 5:
                    bits.append(0)
                    ones = 0
            else:
                ones = 0
    bits += flag + flag + [0] * 40
    return bits


def _afsk(bits):
    samples = []
    phase = 0.0
    state = False
    for bit in bits:
        if not bit:
            state = not state
        freq = 1200.0 if state else 2200.0
        for _ in range(20):
            samples.append(int(2000 * math.sin(phase)))
            phase += 2 * math.pi * freq / 24000.0
    return samples


def _run(rx, samples):
    received = []
    for start in range(0, len(samples), BLOCK):
        received += rx.samples(samples[start:start + BLOCK])
    return received


def test_frame_reported_once_without_checksum():
    payload = b"TEST CALL 0123456789"
    frame = AX25Frame(payload)
    frame.add_crc()
    rx = AX25RX()
    received = _run(rx, _afsk(_hdlc_bits(frame.data)))
    assert received == [payload]


def test_carrier_detected_at_first_slot():
    rx = AX25RX()
    assert rx.samples([0] * BLOCK) == []
    rx.samples([0] * BLOCK)
    assert rx.dcd is True
    assert rx.can_tx() is False


def test_can_transmit_after_silence_with_full_persistence():
    rx = AX25RX()
    rx.set_params(6, 1, 255)
    _run(rx, [0] * 24000)
    assert rx.dcd is False
    assert rx.can_tx() is True


@pytest.mark.parametrize("twist", [-4, 10])
def test_set_params_rejects_twist_out_of_range(twist):
    rx = AX25RX()
    with pytest.raises(ValueError):
        rx.set_params(twist, 30, 128)


@pytest.mark.parametrize("slot_time, p_persist", [(256, 128), (30, -1), (30, 256)])
def test_set_params_rejects_out_of_range_bytes(slot_time, p_persist):
    rx = AX25RX()
    with pytest.raises(ValueError):
        rx.set_params(6, slot_time, p_persist)


def test_no_frames_from_silence():
    rx = AX25RX()
    assert _run(rx, [0] * 2400) == []