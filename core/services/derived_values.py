"""Pulse pressure and mean arterial pressure."""


def round_half_up(numerator: int, denominator: int) -> int:
    """Round ``numerator / denominator`` to the nearest integer, ties toward +inf.

    Exact integer arithmetic, so the result never depends on float representation.
    """
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    return (2 * numerator + denominator) // (2 * denominator)


def pulse_pressure(systolic: int, diastolic: int) -> int:
    return systolic - diastolic


def mean_arterial_pressure(systolic: int, diastolic: int) -> int:
    # (SBP + 2*DBP) / 3 has a fractional part of 0, 1/3 or 2/3 for integer
    # inputs, so ties never reach round_half_up from here.
    return round_half_up(systolic + 2 * diastolic, 3)
