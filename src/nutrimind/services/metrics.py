"""Profile metrics derived from body measurements."""

import math

from nutrimind.domain.models import Gender, UserProfile

DEFAULT_BMR = 1600


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)


def compute_bmr(profile: UserProfile) -> int:
    """Return the Mifflin-St Jeor basal metabolic rate in kcal/day."""
    offset = 5 if profile.gender is Gender.MALE else -161
    return round_half_up(
        10 * profile.weight + 6.25 * profile.height - 5 * profile.age + offset
    )


def bmr_or_default(profile: UserProfile | None) -> int:
    """Return the BMR for a profile, or DEFAULT_BMR when there is none."""
    if profile is None:
        return DEFAULT_BMR
    return compute_bmr(profile)
