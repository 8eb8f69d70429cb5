import struct

import pytest

from hammodem.calibration import (
    NXDN_CAL1K,
    CalFM,
    CalNXDN,
    CalPOCSAG,
    CalRSSI,
    FMCalState,
)


class FakeSink:
    def __init__(self, space):
        self.space = space
        self.writes = []

    def write(self, samples):
        self.writes.append(list(samples))


class FakeTransmitter:
    def __init__(self, room=1):
        self.room = room
        self.frames = []
        self.process_calls = 0

    def process(self):
        self.process_calls += 1

    def space(self):
        return self.room

    def write_data(self, data):
        self.frames.append(bytes(data))


# RSSI


def test_rssi_no_report_before_full_second():
    cal = CalRSSI()
    assert cal.samples([500] * 23999) == []


def test_rssi_constant_report():
    cal = CalRSSI()
    reports = cal.samples([1000] * 24000)
    assert reports == [struct.pack(">HHH", 1000, 1000, 1000)]


def test_rssi_report_extremes_and_average_bounds():
    cal = CalRSSI()
    values = [100] * 12000 + [300] * 12000
    (report,) = cal.samples(values)
    high, low, average = struct.unpack(">HHH", report)
    assert high == 300
    assert low == 100
    assert low <= average <= high


def test_rssi_statistics_reset_between_reports():
    cal = CalRSSI()
    first = cal.samples([4000] * 24000)
    second = cal.samples([20] * 24000)
    assert struct.unpack(">HHH", first[0]) == (4000, 4000, 4000)
    assert struct.unpack(">HHH", second[0]) == (20, 20, 20)


def test_rssi_reports_span_calls():
    cal = CalRSSI()
    assert cal.samples([7] * 20000) == []
    reports = cal.samples([7] * 4000)
    assert len(reports) == 1


# NXDN


def test_nxdn_sent_frames_have_frame_length():
    tx = FakeTransmitter()
    cal = CalNXDN(tx)
    cal.write(b"\x01")
    for _ in range(4):
        cal.process()
    assert all(len(frame) == 49 for frame in tx.frames)
    assert tx.frames[0][:4] == bytes((0x00, 0xCD, 0xF5, 0x9D))


def test_nxdn_idle_writes_nothing():
    tx = FakeTransmitter()
    cal = CalNXDN(tx)
    cal.process()
    assert tx.frames == []
    assert tx.process_calls == 1


def test_nxdn_cycles_through_pattern():
    tx = FakeTransmitter()
    cal = CalNXDN(tx)
    cal.write(b"\x01")
    for _ in range(5):
        cal.process()
    assert tx.frames == [NXDN_CAL1K[i % 4] for i in range(5)]


def test_nxdn_stops_after_switch_off():
    tx = FakeTransmitter()
    cal = CalNXDN(tx)
    cal.write(b"\x01")
    cal.process()
    cal.write(b"\x00")
    cal.process()
    cal.process()
    assert tx.frames == [NXDN_CAL1K[0], NXDN_CAL1K[1]]
    assert cal.active is False


def test_nxdn_restart_begins_at_first_frame():
    tx = FakeTransmitter()
    cal = CalNXDN(tx)
    cal.write(b"\x01")
    cal.process()
    cal.write(b"\x00")
    cal.process()
    cal.process()
    cal.write(b"\x01")
    cal.process()
    assert tx.frames[-1] == NXDN_CAL1K[0]


def test_nxdn_waits_for_space():
    tx = FakeTransmitter(room=0)
    cal = CalNXDN(tx)
    cal.write(b"\x01")
    cal.process()
    assert tx.frames == []
    assert tx.process_calls == 1


def test_nxdn_wrong_length_raises():
    cal = CalNXDN(FakeTransmitter())
    with pytest.raises(ValueError):
        cal.write(b"\x01\x01")


# POCSAG


def test_pocsag_idle_sends_nothing():
    sent = []
    cal = CalPOCSAG(FakeSink(1000), sent.append)
    cal.process()
    assert sent == []


def test_pocsag_sends_pattern_byte():
    sent = []
    cal = CalPOCSAG(FakeSink(166), sent.append)
    cal.write(b"\x01")
    cal.process()
    assert sent == [0xAA]


def test_pocsag_needs_room():
    sent = []
    cal = CalPOCSAG(FakeSink(165), sent.append)
    cal.write(b"\x01")
    cal.process()
    assert sent == []


def test_pocsag_switch_off():
    sent = []
    cal = CalPOCSAG(FakeSink(1000), sent.append)
    cal.write(b"\x01")
    cal.write(b"\x00")
    cal.process()
    assert sent == []
    assert cal.active is False


def test_pocsag_wrong_length_raises():
    cal = CalPOCSAG(FakeSink(1000), lambda b: None)
    with pytest.raises(ValueError):
        cal.write(b"")


# FM


@pytest.mark.parametrize(
    "state, frequency, length",
    [
        (FMCalState.FMCAL10K, 956, 25),
        (FMCalState.FMCAL12K, 1039, 23),
        (FMCalState.FMCAL15K, 1247, 19),
        (FMCalState.FMCAL20K, 1633, 15),
        (FMCalState.FMCAL25K, 2079, 12),
        (FMCalState.FMCAL30K, 2495, 10),
    ],
)
def test_fm_tone_for_state(state, frequency, length):
    cal = CalFM(FakeSink(0))
    cal.process(state)
    assert cal.frequency == frequency
    assert len(cal.tone) == length
    assert cal.tone[0] == 0
    assert max(abs(v) for v in cal.tone) <= 128 * 12


def test_fm_tone_swings_both_ways():
    cal = CalFM(FakeSink(0))
    cal.process(FMCalState.FMCAL10K)
    assert max(cal.tone) > 0
    assert min(cal.tone) < 0


def test_fm_not_transmitting_writes_nothing():
    sink = FakeSink(1000)
    cal = CalFM(sink)
    cal.process(FMCalState.FMCAL20K)
    assert sink.writes == []


def test_fm_fills_available_space_with_whole_tones():
    sink = FakeSink(100)
    cal = CalFM(sink)
    cal.write(b"\x01")
    cal.process(FMCalState.FMCAL10K)
    assert sink.writes
    assert all(w == list(cal.tone) for w in sink.writes)
    total = sum(len(w) for w in sink.writes)
    assert total < 100
    assert 100 - total <= len(cal.tone)


def test_fm_unknown_state_has_no_tone():
    sink = FakeSink(1000)
    cal = CalFM(sink)
    cal.write(b"\x01")
    cal.process("idle")
    assert cal.frequency == 0
    assert sink.writes == []


def test_fm_state_change_rebuilds_tone():
    cal = CalFM(FakeSink(0))
    cal.process(FMCalState.FMCAL10K)
    first = cal.tone
    cal.process(FMCalState.FMCAL30K)
    assert cal.tone != first
    assert len(cal.tone) == 10


def test_fm_wrong_length_raises():
    cal = CalFM(FakeSink(0))
    with pytest.raises(ValueError):
        cal.write(b"\x01\x00")