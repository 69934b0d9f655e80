"""Feeding status classification across direct and communal feedings."""

from collections.abc import Iterable
from datetime import datetime, timedelta

from tarantula_tracker.domain.care import (
    CareSubject,
    FeedingInterval,
    FeedingRecord,
    GroupMembership,
    LifecycleStage,
)
from tarantula_tracker.domain.feeding import (
    FeedingAssessment,
    FeedingBehaviorSignal,
    FeedingStatus,
)
from tarantula_tracker.timeutils import as_utc

NEVER_FED_DAYS = 999.0
SECONDS_PER_DAY = 86400
REFUSAL_WINDOW_DAYS = 30
FEEDING_WINDOW_DAYS = 14

_STAGE_STATUSES = {
    LifecycleStage.PRE_MOLT: FeedingStatus.PRE_MOLT,
    LifecycleStage.MOLTING: FeedingStatus.MOLTING,
    LifecycleStage.POST_MOLT: FeedingStatus.POST_MOLT,
}


def attributable_feedings(
    communal: Iterable[FeedingRecord], memberships: Iterable[GroupMembership]
) -> list[FeedingRecord]:
    """Return the communal feedings that happened during a membership."""
    windows = [membership for membership in memberships if membership.is_valid()]
    attributed = []
    for record in communal:
        if record.group_id is None:
            continue
        if any(
            window.group_id == record.group_id and window.covers(record.fed_at)
            for window in windows
        ):
            attributed.append(record)
    return attributed


def merge_feedings(
    direct: Iterable[FeedingRecord],
    communal: Iterable[FeedingRecord],
    memberships: Iterable[GroupMembership],
) -> list[FeedingRecord]:
    """Return direct and attributable communal feedings, newest first."""
    records = list(direct) + attributable_feedings(communal, memberships)
    return sorted(records, key=lambda record: as_utc(record.fed_at), reverse=True)


def days_between(earlier: datetime, later: datetime) -> float:
    """Return fractional days between two instants, clamped at zero."""
    seconds = (as_utc(later) - as_utc(earlier)).total_seconds()
    return max(seconds, 0.0) / SECONDS_PER_DAY


def days_since_feeding(
    direct: Iterable[FeedingRecord],
    communal: Iterable[FeedingRecord],
    memberships: Iterable[GroupMembership],
    now: datetime,
) -> float:
    """Return days since the most recent attributable feeding."""
    records = merge_feedings(direct, communal, memberships)
    if not records:
        return NEVER_FED_DAYS
    return days_between(records[0].fed_at, now)


def classify(  # noqa: PLR0913
    subject: CareSubject,
    direct: Iterable[FeedingRecord],
    communal: Iterable[FeedingRecord],
    memberships: Iterable[GroupMembership],
    interval: FeedingInterval,
    now: datetime,
    muted_until: datetime | None = None,
) -> FeedingAssessment:
    """Classify the subject's current feeding status.

    Precedence, first match wins: molt-cycle stage, post-molt mute window,
    never fed, overdue, due, recently fed.
    """
    records = merge_feedings(direct, communal, memberships)
    days = days_between(records[0].fed_at, now) if records else NEVER_FED_DAYS
    return FeedingAssessment(
        days_since_feeding=days,
        status=_resolve_status(
            subject, days, interval, now, muted_until, never_fed=not records
        ),
        interval=interval,
    )


def _resolve_status(  # noqa: PLR0913
    subject: CareSubject,
    days: float,
    interval: FeedingInterval,
    now: datetime,
    muted_until: datetime | None,
    *,
    never_fed: bool,
) -> FeedingStatus:
    stage_status = _STAGE_STATUSES.get(subject.stage)
    if stage_status is not None:
        return stage_status
    if muted_until is not None and as_utc(now) < as_utc(muted_until):
        return FeedingStatus.RECOVERING
    if never_fed:
        return FeedingStatus.NEVER_FED
    if days > interval.max_days:
        return FeedingStatus.OVERDUE
    if days >= interval.min_days:
        return FeedingStatus.DUE
    return FeedingStatus.RECENTLY_FED


def summarize_feeding_behavior(
    records: Iterable[FeedingRecord], now: datetime
) -> FeedingBehaviorSignal:
    """Count recent refusals and meals for pre-molt detection."""
    refusal_cutoff = as_utc(now) - timedelta(days=REFUSAL_WINDOW_DAYS)
    feeding_cutoff = as_utc(now) - timedelta(days=FEEDING_WINDOW_DAYS)
    refusals = 0
    feedings = 0
    last_eaten: datetime | None = None
    for record in records:
        fed_at = as_utc(record.fed_at)
        if record.outcome.is_refusal and fed_at >= refusal_cutoff:
            refusals += 1
        if record.outcome.is_eaten:
            if fed_at >= feeding_cutoff:
                feedings += 1
            if last_eaten is None or fed_at > last_eaten:
                last_eaten = fed_at
    return FeedingBehaviorSignal(
        refusals_recent=refusals,
        feedings_recent=feedings,
        days_since_eaten=days_between(last_eaten, now) if last_eaten else None,
    )
