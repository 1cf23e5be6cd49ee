"""
Exposure math for aperture, shutter speed and exposure value (EV).

Given any two of aperture, shutter speed and EV, compute the third. Aperture
and shutter speed results are snapped to the closest value of a stop list,
either the full-stop defaults below or one supplied by the caller (a lens
with uneven stops, an old leaf shutter, half-stop cameras).

Usage:

    ev(5.6, 1 / 1000)                                    # EV 15
    aperture(9, 1 / 60, [1.2, 1.4, 2, 4, 5.6, 8, 11, 16])  # f/2
    shutter_speed(5, 3.5, [2, 5, 10, 25, 50, 100, 250, 500])
"""

import logging
import math
from typing import Final, Iterable, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_APERTURES",
    "DEFAULT_TIMES",
    "ExposureDomainError",
    "aperture",
    "closest_match",
    "ev",
    "round_half_away_from_zero",
    "shutter_speed",
]

# Full-stop f-numbers from f/1 to f/64. f/2 is not part of the table.
DEFAULT_APERTURES: Final[Tuple[float, ...]] = (
    1.0, 1.4, 2.8, 4.0, 5.6, 8.0, 11, 16, 22, 32, 45, 64,
)

# Shutter speeds in seconds, 32 minutes down to 1/8000s. Order is significant
# for tie-breaking and is not strictly numeric.
DEFAULT_TIMES: Final[Tuple[float, ...]] = (
    *(m * 60 for m in (32, 16, 8, 4, 2)),
    60, 30, 15, 8, 4, 2, 1,
    *(1 / d for d in (2, 4, 8, 15, 30, 125, 250, 500, 1000, 2000, 4000, 8000)),
)


class ExposureDomainError(ValueError):
    """Input or computed exposure value outside the positive finite reals."""


def _require_finite(name: str, value: float) -> float:
    try:
        number = float(value)
    except OverflowError as exc:
        raise ExposureDomainError(f"{name} must be finite, got {value!r}") from exc
    if not math.isfinite(number):
        raise ExposureDomainError(f"{name} must be finite, got {value!r}")
    return number


def _require_positive(name: str, value: float) -> float:
    number = _require_finite(name, value)
    if not number > 0:
        raise ExposureDomainError(f"{name} must be positive and finite, got {value!r}")
    return number


def _out_of_range(result: str, **inputs: float) -> ExposureDomainError:
    args = ", ".join(f"{name}={value!r}" for name, value in inputs.items())
    return ExposureDomainError(f"{result} is not representable as a positive finite float for {args}")


def round_half_away_from_zero(x: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    if x == 0:
        return 0
    return int(x + x / (2 * abs(x)))


def closest_match(target: float, candidates: Iterable[float]) -> Optional[float]:
    """
    Return the candidate with the smallest absolute difference to target.

    Candidates are scanned in the order given; on an exact tie the earlier
    one wins. Returns None when there are no candidates.
    """
    best = None
    best_diff = 0.0
    for candidate in candidates:
        diff = abs(candidate - target)
        if best is None or diff < best_diff:
            best = candidate
            best_diff = diff
    return best


def ev(aperture: float, time: float) -> int:
    """Compute the integer Exposure Value (EV) from f-number and shutter speed in seconds."""
    f_number = _require_positive("aperture", aperture)
    seconds = _require_positive("time", time)
    try:
        ratio = (f_number ** 2) / seconds
    except OverflowError as exc:
        raise _out_of_range("EV", aperture=aperture, time=time) from exc
    if not 0 < ratio < math.inf:
        raise _out_of_range("EV", aperture=aperture, time=time)
    return round_half_away_from_zero(math.log2(ratio))


def aperture(
    ev: float, time: float, stops: Sequence[float] = DEFAULT_APERTURES
) -> Optional[float]:
    """
    Compute the aperture for an EV and shutter speed (seconds).

    The exact f-number sqrt(2**ev * time) is snapped to the closest entry of
    ``stops``. Returns None if ``stops`` is empty. Raises ExposureDomainError
    when the exact f-number overflows or underflows to zero.
    """
    value = _require_finite("ev", ev)
    seconds = _require_positive("time", time)
    try:
        exact = math.sqrt((2.0 ** value) * seconds)
    except OverflowError as exc:
        raise _out_of_range("aperture", ev=ev, time=time) from exc
    if not 0 < exact < math.inf:
        raise _out_of_range("aperture", ev=ev, time=time)
    result = closest_match(exact, stops)
    if result is None:
        logger.warning(f"aperture: empty stop list, no match for f/{exact:.3f}")
    elif logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"aperture: EV {ev} @ {time}s -> exact f/{exact:.3f}, snapped f/{result}")
    return result


def shutter_speed(
    ev: float, aperture: float, stops: Sequence[float] = DEFAULT_TIMES
) -> Optional[float]:
    """
    Compute the shutter speed in seconds for an EV and f-number.

    The exact time aperture**2 / 2**ev is snapped to the closest entry of
    ``stops``. Returns None if ``stops`` is empty. Raises ExposureDomainError
    when the exact time overflows or underflows to zero.
    """
    value = _require_finite("ev", ev)
    f_number = _require_positive("aperture", aperture)
    try:
        exact = (f_number ** 2) / (2.0 ** value)
    except (OverflowError, ZeroDivisionError) as exc:
        raise _out_of_range("shutter speed", ev=ev, aperture=aperture) from exc
    if not 0 < exact < math.inf:
        raise _out_of_range("shutter speed", ev=ev, aperture=aperture)
    result = closest_match(exact, stops)
    if result is None:
        logger.warning(f"shutter_speed: empty stop list, no match for {exact:.6g}s")
    elif logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"shutter_speed: EV {ev} @ f/{aperture} -> exact {exact:.6g}s, snapped {result}s")
    return result
