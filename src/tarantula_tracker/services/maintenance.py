"""Due/overdue checks for communal group upkeep."""

from collections.abc import Iterable
from datetime import datetime

from tarantula_tracker.domain.care import MaintenanceSchedule
from tarantula_tracker.domain.notifications import MaintenanceAlert
from tarantula_tracker.services.feeding import days_between


def check_maintenance(
    schedules: Iterable[MaintenanceSchedule], now: datetime
) -> list[MaintenanceAlert]:
    """Return an alert for every task that is due or overdue.

    Tasks that were never performed are reported without a day count.
    """
    alerts = []
    for schedule in schedules:
        if schedule.frequency_days <= 0:
            continue
        if schedule.last_performed_at is None:
            alerts.append(
                MaintenanceAlert(
                    group_name=schedule.group_name,
                    task=schedule.task,
                    days_overdue=None,
                )
            )
            continue
        elapsed = days_between(schedule.last_performed_at, now)
        if elapsed >= schedule.frequency_days:
            alerts.append(
                MaintenanceAlert(
                    group_name=schedule.group_name,
                    task=schedule.task,
                    days_overdue=int(elapsed - schedule.frequency_days),
                )
            )
    return alerts
