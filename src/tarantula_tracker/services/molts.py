"""Molt cycle estimation from sparse molt history and species data.

The estimator picks one of three tiers:

* empirical: two or more molts with a usable average gap, projected forward
  from the latest molt;
* hybrid: a single molt (or no usable average), projected forward by the
  species/size heuristic; the animal's stored last molt date counts as one;
* heuristic: no molt history at all, which yields an expected cycle length
  but no date.

All band boundaries and weights live in the tables below so they can be
checked independently of the decision logic.
"""

from collections.abc import Sequence
from datetime import datetime, timedelta

from tarantula_tracker.domain.care import (
    CareSubject,
    LifecycleStage,
    MoltRecord,
    SpeciesProfile,
)
from tarantula_tracker.domain.feeding import FeedingBehavior, FeedingBehaviorSignal
from tarantula_tracker.domain.molts import (
    ConfidenceLevel,
    EstimationTier,
    MoltPrediction,
)
from tarantula_tracker.services.feeding import days_between
from tarantula_tracker.services.intervals import match_interval
from tarantula_tracker.timeutils import as_utc

# (upper bound of size ratio, base cycle days); the last entry catches the rest.
SIZE_RATIO_CYCLE_LADDER: tuple[tuple[float, int], ...] = (
    (0.25, 60),
    (0.40, 90),
    (0.55, 120),
    (0.70, 180),
    (0.85, 240),
    (1.00, 300),
    (float("inf"), 420),
)

# (upper bound of estimated age in months, base cycle days).
AGE_MONTHS_CYCLE_LADDER: tuple[tuple[float, int], ...] = (
    (6, 60),
    (12, 90),
    (18, 120),
    (24, 180),
    (36, 240),
    (48, 300),
    (float("inf"), 420),
)

DEFAULT_CYCLE_DAYS = 180
MIN_CYCLE_DAYS = 30
MIN_MOLTS_FOR_AVERAGE = 2

TEMPERAMENT_MULTIPLIERS: dict[str, float] = {
    "fast": 0.85,
    "aggressive": 0.85,
    "slow": 1.15,
    "docile": 1.15,
}

FAST_CADENCE_DAYS = 5
SLOW_CADENCE_DAYS = 14
FAST_CADENCE_MULTIPLIER = 0.9
SLOW_CADENCE_MULTIPLIER = 1.1

# Molt-count points keyed by number of molts when an average is computable.
HISTORY_POINTS = {3: 3, 2: 2}
SINGLE_HISTORY_POINTS = 1
ADULT_SIZE_POINTS = 1
CADENCE_POINTS = 1
BEHAVIOR_POINTS = 1
TIER_POINTS = {
    EstimationTier.EMPIRICAL: 2,
    EstimationTier.HYBRID: 0,
    EstimationTier.HEURISTIC: -1,
}

# (minimum score, label), checked top-down.
CONFIDENCE_THRESHOLDS: tuple[tuple[int, ConfidenceLevel], ...] = (
    (5, ConfidenceLevel.HIGH),
    (3, ConfidenceLevel.MEDIUM),
    (1, ConfidenceLevel.LOW),
)

# (upper bound of size ratio, label).
SIZE_INDICATOR_LADDER: tuple[tuple[float, str], ...] = (
    (0.3, "Spiderling"),
    (0.6, "Juvenile"),
    (0.9, "Sub-adult"),
    (float("inf"), "Adult"),
)
UNKNOWN_SIZE_INDICATOR = "Unknown"

SIGN_REFUSING_FOOD = "Refusing food"
SIGN_EATING_LESS = "Eating less"
SIGN_PRE_MOLT_STAGE = "Pre-molt stage recorded"

RECENT_MOLT_DAYS = 14
EXTENDED_FAST_DAYS = 30

RECOMMEND_NO_HISTORY = (
    "No molts recorded yet. Log the next molt to enable date predictions."
)
RECOMMEND_RECENT_MOLT = (
    "Recently molted. Keep the enclosure undisturbed and wait for the fangs "
    "to harden before feeding."
)
RECOMMEND_PRE_MOLT_SIGNS = (
    "Strong pre-molt signs. Remove uneaten prey and keep fresh water available."
)
RECOMMEND_EXTENDED_FAST = (
    "Long fast without recorded refusals. Watch for a darkened abdomen or "
    "extra webbing."
)

# (upper bound of days until molt, advice); the last entry catches the rest.
DAYS_UNTIL_RECOMMENDATIONS: tuple[tuple[float, str], ...] = (
    (
        -60,
        "Well past the estimated date. Molt intervals vary a lot, so keep "
        "observing and offer water.",
    ),
    (
        -14,
        "Past the estimated date. Longer gaps are normal as the spider grows.",
    ),
    (0, "Molt expected any day now. Stop feeding and keep water available."),
    (14, "Molt likely within two weeks. Offer smaller prey and watch for refusals."),
    (30, "Molt expected within a month. Keep feeding normally."),
    (90, "Molt expected in the next few months. Continue regular care."),
    (float("inf"), "No molt expected soon. Continue regular care."),
)


def size_ratio(subject: CareSubject, profile: SpeciesProfile | None) -> float | None:
    """Return current size divided by adult size, if both are known."""
    if profile is None or not profile.adult_size_cm:
        return None
    if not subject.current_size_cm or subject.current_size_cm <= 0:
        return None
    return subject.current_size_cm / profile.adult_size_cm


def _ladder_lookup(ladder: Sequence[tuple[float, object]], value: float) -> object:
    for upper, result in ladder:
        if value < upper:
            return result
    return ladder[-1][1]


def base_cycle_days(subject: CareSubject, profile: SpeciesProfile | None) -> int:
    """Return the size- or age-based cycle before any scaling."""
    ratio = size_ratio(subject, profile)
    if ratio is not None:
        return int(_ladder_lookup(SIZE_RATIO_CYCLE_LADDER, ratio))
    if subject.estimated_age_months and subject.estimated_age_months > 0:
        return int(
            _ladder_lookup(AGE_MONTHS_CYCLE_LADDER, subject.estimated_age_months)
        )
    return DEFAULT_CYCLE_DAYS


def temperament_multiplier(profile: SpeciesProfile | None) -> float:
    """Return the cycle multiplier for the species temperament."""
    if profile is None or not profile.temperament:
        return 1.0
    return TEMPERAMENT_MULTIPLIERS.get(profile.temperament.strip().lower(), 1.0)


def feeding_cadence_days(
    subject: CareSubject, profile: SpeciesProfile | None
) -> float | None:
    """Return the species' typical days between feedings at this size."""
    interval = match_interval(profile, subject.current_size_cm)
    if interval is None:
        return None
    return interval.cadence_days


def cadence_multiplier(cadence_days: float | None) -> float:
    """Return the cycle multiplier for the feeding cadence."""
    if cadence_days is None:
        return 1.0
    if cadence_days <= FAST_CADENCE_DAYS:
        return FAST_CADENCE_MULTIPLIER
    if cadence_days >= SLOW_CADENCE_DAYS:
        return SLOW_CADENCE_MULTIPLIER
    return 1.0


def heuristic_cycle_days(subject: CareSubject, profile: SpeciesProfile | None) -> int:
    """Return the species/size cycle estimate in whole days."""
    scaled = (
        base_cycle_days(subject, profile)
        * temperament_multiplier(profile)
        * cadence_multiplier(feeding_cadence_days(subject, profile))
    )
    return max(MIN_CYCLE_DAYS, round(scaled))


def average_cycle(history: Sequence[MoltRecord]) -> timedelta | None:
    """Return the mean gap between molts, or None when it is not usable."""
    if len(history) < MIN_MOLTS_FOR_AVERAGE:
        return None
    dates = sorted(as_utc(record.molted_at) for record in history)
    average = (dates[-1] - dates[0]) / (len(dates) - 1)
    if average <= timedelta(0):
        return None
    return average


def confidence_score(
    history_count: int,
    has_average: bool,
    *,
    has_adult_size: bool,
    has_cadence: bool,
    behavior: FeedingBehavior,
    tier: EstimationTier,
) -> int:
    """Combine the evidence into a single integer score."""
    score = 0
    if has_average:
        score += HISTORY_POINTS[min(history_count, 3)]
    elif history_count > 0:
        score += SINGLE_HISTORY_POINTS
    if has_adult_size:
        score += ADULT_SIZE_POINTS
    if has_cadence:
        score += CADENCE_POINTS
    if behavior is FeedingBehavior.STOPPED:
        score += BEHAVIOR_POINTS
    return score + TIER_POINTS[tier]


def confidence_level(score: int) -> ConfidenceLevel:
    """Map a score onto the four-level label."""
    for minimum, level in CONFIDENCE_THRESHOLDS:
        if score >= minimum:
            return level
    return ConfidenceLevel.NONE


def size_indicator(ratio: float | None) -> str:
    """Describe the growth stage implied by the size ratio."""
    if ratio is None:
        return UNKNOWN_SIZE_INDICATOR
    return str(_ladder_lookup(SIZE_INDICATOR_LADDER, ratio))


def pre_molt_signs(
    subject: CareSubject, signal: FeedingBehaviorSignal
) -> list[str]:
    """List observable signs that point towards an upcoming molt.

    "Eating less" needs at least one accepted feeding to compare against,
    so an animal with no feeding history shows no appetite sign.
    """
    signs = []
    behavior = signal.behavior
    if behavior is FeedingBehavior.STOPPED:
        signs.append(SIGN_REFUSING_FOOD)
    elif behavior is FeedingBehavior.REDUCED and signal.days_since_eaten is not None:
        signs.append(SIGN_EATING_LESS)
    if subject.stage is LifecycleStage.PRE_MOLT:
        signs.append(SIGN_PRE_MOLT_STAGE)
    return signs


def recommend(
    *,
    last_molt_at: datetime | None,
    days_until: int | None,
    signal: FeedingBehaviorSignal,
    now: datetime,
) -> str:
    """Pick the advisory message for a prediction."""
    if last_molt_at is None:
        return RECOMMEND_NO_HISTORY
    if days_between(last_molt_at, now) < RECENT_MOLT_DAYS:
        return RECOMMEND_RECENT_MOLT
    if signal.behavior is FeedingBehavior.STOPPED:
        return RECOMMEND_PRE_MOLT_SIGNS
    if (
        signal.days_since_eaten is not None
        and signal.days_since_eaten >= EXTENDED_FAST_DAYS
    ):
        return RECOMMEND_EXTENDED_FAST
    if days_until is None:
        return DAYS_UNTIL_RECOMMENDATIONS[-1][1]
    for upper, message in DAYS_UNTIL_RECOMMENDATIONS:
        if days_until <= upper:
            return message
    return DAYS_UNTIL_RECOMMENDATIONS[-1][1]


def latest_molt(
    subject: CareSubject, history: Sequence[MoltRecord]
) -> datetime | None:
    """Return the latest known molt from the history or the animal record."""
    dates = [as_utc(record.molted_at) for record in history]
    if subject.last_molt_at is not None:
        dates.append(as_utc(subject.last_molt_at))
    return max(dates, default=None)


def estimate(
    subject: CareSubject,
    history: Sequence[MoltRecord],
    profile: SpeciesProfile | None,
    signal: FeedingBehaviorSignal,
    now: datetime,
) -> MoltPrediction:
    """Predict the next molt for a subject."""
    average = average_cycle(history)
    last_molt_at = latest_molt(subject, history)
    if average is not None:
        tier = EstimationTier.EMPIRICAL
        cycle = average
    elif last_molt_at is not None:
        tier = EstimationTier.HYBRID
        cycle = timedelta(days=heuristic_cycle_days(subject, profile))
    else:
        tier = EstimationTier.HEURISTIC
        cycle = timedelta(days=heuristic_cycle_days(subject, profile))

    predicted_at = None
    days_until = None
    if last_molt_at is not None:
        predicted_at = last_molt_at + cycle
        days_until = (predicted_at.date() - as_utc(now).date()).days

    behavior = signal.behavior
    history_count = len(history)
    if history_count == 0 and last_molt_at is not None:
        history_count = 1
    score = confidence_score(
        history_count,
        average is not None,
        has_adult_size=bool(profile and profile.adult_size_cm),
        has_cadence=feeding_cadence_days(subject, profile) is not None,
        behavior=behavior,
        tier=tier,
    )
    return MoltPrediction(
        tier=tier,
        cycle_days=cycle.total_seconds() / 86400,
        confidence=confidence_level(score),
        confidence_score=score,
        size_indicator=size_indicator(size_ratio(subject, profile)),
        feeding_behavior=behavior,
        recommendation=recommend(
            last_molt_at=last_molt_at,
            days_until=days_until,
            signal=signal,
            now=now,
        ),
        predicted_at=predicted_at,
        days_until=days_until,
        last_molt_at=last_molt_at,
        signs=pre_molt_signs(subject, signal),
    )
