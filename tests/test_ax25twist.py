import pytest

from hammodem.ax25twist import MAX_TWIST, MIN_TWIST, AX25Twist, twist_coefficients


def test_range_bounds():
    assert MIN_TWIST == -6
    assert MAX_TWIST == 12
    assert twist_coefficients(6)[4] == 32767


def test_out_of_range_rejected():
    with pytest.raises(ValueError):
        AX25Twist(MAX_TWIST + 1)
    twist = AX25Twist(0)
    with pytest.raises(ValueError):
        twist.set_twist(MIN_TWIST - 1)
    assert twist.twist == 0


@pytest.mark.parametrize("setting", range(MIN_TWIST, MAX_TWIST + 1))
def test_impulse_response_is_symmetric(setting):
    twist = AX25Twist(setting)
    out = twist.process([32767] + [0] * 12)
    assert out[:9] == out[8::-1]
    assert out[9:] == [0, 0, 0, 0]


def test_flat_setting_delays_by_four_samples():
    twist = AX25Twist(6)
    samples = [1000, -2000, 3000, -4000, 5000, 0, 0, 0, 0]
    out = twist.process(samples)
    assert out[:4] == [0, 0, 0, 0]
    # 32767/32768 gain rounds each sample one step towards minus infinity.
    assert out[4:] == [s - 1 if s > 0 else s for s in samples[:5]]


def test_set_twist_keeps_history():
    samples = [((i * 131) % 2001) - 1000 for i in range(20)]
    a = AX25Twist(0)
    a.process(samples)
    a.set_twist(3)
    b = AX25Twist(3)
    b.process(samples)
    assert a.process(samples) == b.process(samples)
    assert a.twist == 3