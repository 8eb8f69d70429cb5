import pytest

from hammodem.ax25frame import AX25Frame
from hammodem.ax25tx import AX25TX


class FakeSink:
    def __init__(self, space=0):
        self.space = space
        self.writes = []

    def write(self, samples):
        self.writes.append(list(samples))


FLAG = [False, True, True, True, True, True, True, False]


def decode(bits, preamble):
    raw = []
    prev = False
    for line in bits:
        raw.append(line == prev)
        prev = line
    assert raw[preamble:preamble + 8] == FLAG
    assert raw[-8:] == FLAG
    body = raw[preamble + 8:-8]
    out = []
    ones = 0
    skip = False
    for b in body:
        if skip:
            skip = False
            assert not b
            continue
        out.append(b)
        ones = ones + 1 if b else 0
        if ones == 5:
            skip = True
            ones = 0
    assert len(out) % 8 == 0
    return bytes(
        sum(int(bit) << i for i, bit in enumerate(out[k:k + 8]))
        for k in range(0, len(out), 8)
    )


@pytest.mark.parametrize("payload", [b"TEST", b"\xff\xff\xff", b"\x00" * 20, bytes(range(40))])
def test_round_trip_with_stuffing_and_crc(payload):
    tx = AX25TX(FakeSink())
    tx.set_tx_delay(2)
    tx.write_data(payload)
    decoded = decode(tx.bits, 24)
    assert decoded[:-2] == payload
    assert AX25Frame(decoded).check_crc()


def test_preamble_alternates():
    tx = AX25TX(FakeSink())
    tx.set_tx_delay(10)
    tx.write_data(b"A")
    assert list(tx.bits[:120]) == [i % 2 == 0 for i in range(120)]


def test_default_preamble_length():
    tx = AX25TX(FakeSink())
    tx.write_data(b"A")
    decoded = decode(tx.bits, 360)
    assert decoded[:-2] == b"A"


def test_process_writes_whole_symbols_within_space():
    sink = FakeSink(space=61)
    tx = AX25TX(sink)
    tx.write_data(b"TEST")
    before = tx.pending
    tx.process()
    assert [len(w) for w in sink.writes] == [20, 20, 20]
    assert tx.pending == before - 3
    assert sink.writes[0][0] == 0
    # First bit is a mark (de-emphasised), second a space tone.
    assert max(abs(v) for v in sink.writes[0]) < max(abs(v) for v in sink.writes[1])


def test_waits_for_channel_when_not_duplex():
    sink = FakeSink(space=41)
    allowed = [False]
    tx = AX25TX(sink, can_tx=lambda: allowed[0])
    tx.write_data(b"X")
    total = tx.pending
    tx.process()
    assert sink.writes == []
    allowed[0] = True
    tx.process()
    allowed[0] = False
    tx.process()
    assert tx.pending == total - 4


def test_duplex_ignores_channel():
    sink = FakeSink(space=41)
    tx = AX25TX(sink, can_tx=lambda: False, duplex=True)
    tx.write_data(b"X")
    tx.process()
    assert len(sink.writes) == 2


def test_complete_frame_frees_transmitter():
    sink = FakeSink()
    tx = AX25TX(sink)
    tx.set_tx_delay(0)
    assert tx.space() == 255
    tx.write_data(b"A")
    assert tx.space() == 0
    n = len(tx.bits)
    sink.space = 20 * n + 1000
    tx.process()
    assert sum(len(w) for w in sink.writes) == 20 * n
    assert tx.pending == 0
    assert tx.space() == 255
    tx.process()
    assert sum(len(w) for w in sink.writes) == 20 * n


def test_invalid_tx_delay():
    tx = AX25TX(FakeSink())
    with pytest.raises(ValueError):
        tx.set_tx_delay(256)