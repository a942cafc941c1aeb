import random
import time
from typing import List, Optional

NUMBER_MIN = 1
NUMBER_MAX = 90
POOL_SIZE = NUMBER_MAX - NUMBER_MIN + 1


def remaining_numbers(drawn: List[int]) -> List[int]:
    taken = set(drawn)
    return [n for n in range(NUMBER_MIN, NUMBER_MAX + 1) if n not in taken]


def pick_number(drawn: List[int], rng: Optional[random.Random] = None) -> int:
    """Uniformly pick an undrawn number. Caller guarantees one is left."""
    rng = rng or random
    return rng.choice(remaining_numbers(drawn))


def now_ms() -> int:
    return int(time.time() * 1000)


def reveal_time(lead_ms: int) -> int:
    """Epoch-millis instant at which clients start the reveal animation."""
    return now_ms() + int(lead_ms)
