"""
Severity classification of a blood-pressure reading.

The bands overlap, so the order of the checks below is the rule: the first
matching band wins, from the most to the least urgent.
"""

from core.domain.models import SeverityLevel


def classify(systolic: int, diastolic: int) -> SeverityLevel:
    """Map a systolic/diastolic pair (mmHg) to its severity band."""
    if systolic >= 180 or diastolic >= 120:
        return SeverityLevel.CRISIS
    if systolic >= 140 or diastolic >= 90:
        return SeverityLevel.STAGE2
    if 130 <= systolic <= 139 or 80 <= diastolic <= 89:
        return SeverityLevel.STAGE1
    if 120 <= systolic <= 129 and diastolic < 80:
        return SeverityLevel.ELEVATED
    if systolic < 90 or diastolic < 60:
        return SeverityLevel.LOW
    return SeverityLevel.NORMAL
