import math
from typing import NamedTuple

MAX_RAW_SCORE = 85


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity.

    The built-in ``round`` rounds halves to even and would turn 12.5 into 12.
    """
    return int(math.floor(value + 0.5))


def clamp(value, low, high):
    return max(low, min(high, value))


def normalize_score(score: float, max_score: float = MAX_RAW_SCORE) -> int:
    return round_half_up(score / max_score * 100)


class ScoreBand(NamedTuple):
    low: int
    high: int
    label: str
    icon: str

    @property
    def range(self) -> str:
        return f"{self.low}-{self.high}"


SCORE_BANDS = (
    ScoreBand(81, 100, "Excelente", "📈"),
    ScoreBand(61, 80, "Bom", "📊"),
    ScoreBand(41, 60, "Regular", "📉"),
    ScoreBand(21, 40, "Ruim", "🚨"),
    ScoreBand(0, 20, "Crítico", "🚨"),
)


def score_band(normalized: int) -> ScoreBand:
    for band in SCORE_BANDS:
        if normalized >= band.low:
            return band
    return SCORE_BANDS[-1]


def score_label(normalized: int) -> str:
    return score_band(normalized).label
