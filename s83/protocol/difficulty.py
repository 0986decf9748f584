"""Population-scaled admission difficulty for new publisher keys."""

from dataclasses import dataclass, field
from typing import Callable

from ._constants import MAX_NUM_BOARDS
from .identity import Publisher

MAX_KEY = 2**256 - 1


def difficulty_factor(num_boards: int) -> float:
    """difficulty_factor = (num_boards / 10_000_000) ** 4"""
    return (num_boards / MAX_NUM_BOARDS) ** 4


def key_threshold(factor: float) -> int:
    """key_threshold = max_key * (1.0 - factor), at double precision.

    The product is rounded to a double, so factor 0 yields max_key + 1 and
    every key is admitted.
    """
    return int((1.0 - factor) * float(MAX_KEY))


@dataclass(frozen=True)
class DifficultyGate:
    """Admission check for keys without an existing board.

    ``factor_source`` is called on every check so the threshold tracks the
    current board population.
    """

    enabled: bool = False
    factor_source: Callable[[], float] = field(default=lambda: 0.0)

    def threshold(self) -> int:
        return key_threshold(self.factor_source())

    def admits(self, publisher: Publisher) -> bool:
        if not self.enabled:
            return True
        return publisher.strength < self.threshold()
