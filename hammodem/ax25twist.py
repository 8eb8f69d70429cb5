"""Selectable pre-emphasis ("twist") filters for the AX.25 AFSK receiver."""

from collections.abc import Iterable

from hammodem.dsp import FirFilterQ15

# Index 0 boosts 2200 Hz by 12 dB relative to 1200 Hz, index 12 is flat,
# index 18 attenuates 2200 Hz by 6 dB.
_TWIST_TABLES: tuple[tuple[int, ...], ...] = (
    (176, -812, -3916, -7586, 23536, -7586, -3916, -812, 176),
    (121, -957, -3959, -7383, 23871, -7383, -3959, -957, 121),
    (56, -1110, -3987, -7141, 24254, -7141, -3987, -1110, 56),
    (-19, -1268, -3994, -6856, 24688, -6856, -3994, -1268, -19),
    (-104, -1424, -3968, -6516, 25182, -6516, -3968, -1424, -104),
    (-196, -1565, -3896, -6114, 25742, -6114, -3896, -1565, -196),
    (-288, -1676, -3761, -5642, 26370, -5642, -3761, -1676, -288),
    (-370, -1735, -3545, -5088, 27075, -5088, -3545, -1735, -370),
    (-432, -1715, -3220, -4427, 27880, -4427, -3220, -1715, -432),
    (-452, -1582, -2759, -3646, 28792, -3646, -2759, -1582, -452),
    (-408, -1295, -2123, -2710, 29846, -2710, -2123, -1295, -408),
    (-268, -795, -1244, -1546, 31116, -1546, -1244, -795, -268),
    (0, 0, 0, 0, 32767, 0, 0, 0, 0),
    (-419, -177, 3316, 8650, 11278, 8650, 3316, -177, -419),
    (-90, 1033, 3975, 7267, 8711, 7267, 3975, 1033, -90),
    (292, 1680, 3752, 5615, 6362, 5615, 3752, 1680, 292),
    (917, 3024, 5131, 6684, 7255, 6684, 5131, 3024, 917),
    (1620, 3339, 4925, 6042, 6444, 6042, 4925, 3339, 1620),
    (2161, 3472, 4605, 5373, 5644, 5373, 4605, 3472, 2161),
)

MIN_TWIST = -6
MAX_TWIST = MIN_TWIST + len(_TWIST_TABLES) - 1


def twist_coefficients(twist: int) -> tuple[int, ...]:
    """Coefficients of the twist filter for setting ``twist``."""
    if not MIN_TWIST <= twist <= MAX_TWIST:
        raise ValueError(f"twist must be between {MIN_TWIST} and {MAX_TWIST}")
    return _TWIST_TABLES[twist - MIN_TWIST]


class AX25Twist:
    """A 9-tap twist filter whose setting can change without losing history."""

    def __init__(self, twist: int):
        self._filter = FirFilterQ15(twist_coefficients(twist))
        self.twist = twist

    def process(self, samples: Iterable[int]) -> list[int]:
        """Filter a block of Q15 samples."""
        return self._filter.process(samples)

    def set_twist(self, twist: int) -> None:
        """Select another twist setting; the filter history is kept."""
        self._filter.coeffs = twist_coefficients(twist)
        self.twist = twist