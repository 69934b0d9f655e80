"""Render structured alerts as Telegram Markdown messages."""

from tarantula_tracker.domain.feeding import FeedingStatus
from tarantula_tracker.domain.notifications import (
    AlertPayload,
    FeedingAlert,
    MaintenanceAlert,
    MoltAlert,
    NotificationPreferences,
)

STATUS_LABELS: dict[FeedingStatus, str] = {
    FeedingStatus.PRE_MOLT: "Pre-molt",
    FeedingStatus.MOLTING: "Molting",
    FeedingStatus.POST_MOLT: "Post-molt",
    FeedingStatus.RECOVERING: "Recovering from molt",
    FeedingStatus.NEVER_FED: "Never fed",
    FeedingStatus.OVERDUE: "Overdue",
    FeedingStatus.DUE: "Due",
    FeedingStatus.RECENTLY_FED: "Recently fed",
}

_MARKDOWN_SPECIAL = ("_", "*", "`", "[")

MOLT_TIP = "_Tip: Stop feeding and keep water available when a molt is imminent._"


def status_label(status: FeedingStatus) -> str:
    """Return the display text for a feeding status."""
    return STATUS_LABELS[status]


def escape_markdown(text: str) -> str:
    """Escape characters that Telegram's legacy Markdown treats as markup."""
    for char in _MARKDOWN_SPECIAL:
        text = text.replace(char, f"\\{char}")
    return text


def format_days_until(days: int) -> str:
    if days == 0:
        return "today"
    if days == 1:
        return "tomorrow"
    return f"in {days} days"


def _feeding_line(alert: FeedingAlert) -> str:
    name = escape_markdown(alert.subject_name)
    if alert.species_name:
        name = f"{name} ({escape_markdown(alert.species_name)})"
    if alert.status is FeedingStatus.NEVER_FED:
        return f"- {name}: {status_label(alert.status)}, no feedings recorded yet"
    return (
        f"- {name}: {alert.days_since_feeding:.0f} days since last feeding "
        f"(recommended: {alert.min_days}-{alert.max_days} days)"
    )


def format_feeding_alerts(alerts: list[FeedingAlert]) -> str | None:
    """Group feeding alerts into overdue and due sections."""
    if not alerts:
        return None
    overdue = [
        alert
        for alert in alerts
        if alert.status in {FeedingStatus.OVERDUE, FeedingStatus.NEVER_FED}
    ]
    due = [alert for alert in alerts if alert.status is FeedingStatus.DUE]
    lines = ["*Feeding Schedule Update*", ""]
    if overdue:
        lines.append("*Overdue:*")
        lines.extend(_feeding_line(alert) for alert in overdue)
        lines.append("")
    if due:
        lines.append("*Due for feeding:*")
        lines.extend(_feeding_line(alert) for alert in due)
    return "\n".join(lines).rstrip()


def format_molt_alerts(alerts: list[MoltAlert]) -> str | None:
    """Describe upcoming molts with confidence and advice."""
    if not alerts:
        return None
    lines = [
        "*Upcoming Molt Predictions*",
        "",
        "The following tarantulas are predicted to molt soon:",
        "",
    ]
    for alert in alerts:
        prediction = alert.prediction
        lines.append(f"*{escape_markdown(alert.subject_name)}*")
        if prediction.days_until is not None:
            lines.append(
                f"- Predicted molt: {format_days_until(prediction.days_until)}"
            )
        lines.append(f"- Confidence: {prediction.confidence.value}")
        if prediction.signs:
            lines.append(f"- Signs: {', '.join(prediction.signs)}")
        lines.append(f"- {prediction.recommendation}")
        lines.append("")
    lines.append(MOLT_TIP)
    return "\n".join(lines)


def format_maintenance_alerts(alerts: list[MaintenanceAlert]) -> str | None:
    """List overdue upkeep tasks grouped by group name."""
    if not alerts:
        return None
    by_group: dict[str, list[MaintenanceAlert]] = {}
    for alert in alerts:
        by_group.setdefault(alert.group_name, []).append(alert)
    lines = ["*Colony Maintenance Reminder*", ""]
    for group_name, group_alerts in by_group.items():
        lines.append(f"*{escape_markdown(group_name)}*:")
        for alert in group_alerts:
            task = escape_markdown(alert.task)
            if alert.days_overdue is None:
                lines.append(f"- {task}: never done")
            elif alert.days_overdue == 0:
                lines.append(f"- {task}: due today")
            else:
                lines.append(f"- {task}: {alert.days_overdue} days overdue")
        lines.append("")
    return "\n".join(lines).rstrip()


def render_payload(payload: AlertPayload) -> list[str]:
    """Return one message per non-empty alert category."""
    messages = (
        format_feeding_alerts(payload.feeding),
        format_molt_alerts(payload.molts),
        format_maintenance_alerts(payload.maintenance),
    )
    return [message for message in messages if message]


def format_preferences(preferences: NotificationPreferences) -> str:
    """Summarize notification settings for the /settings command."""

    def on_off(flag: bool) -> str:
        return "on" if flag else "off"

    lines = [
        "*Notification settings*",
        f"Notifications: {on_off(preferences.notifications_enabled)}",
        f"Time (UTC): {preferences.notification_time_utc}",
        f"Feeding reminder: {preferences.feeding_reminder_days} days",
        f"Molt predictions: {on_off(preferences.molt_predictions_enabled)}",
        f"Molt alert: {preferences.molt_alert_days} days before",
        f"Post-molt mute: {preferences.post_molt_mute_days} days",
        f"Maintenance reminders: {on_off(preferences.maintenance_reminders_enabled)}",
    ]
    if preferences.paused:
        if preferences.pause_end is None:
            lines.append("Paused until you send /resume")
        else:
            lines.append(
                f"Paused until {preferences.pause_end:%Y-%m-%d %H:%M} UTC"
            )
    return "\n".join(lines)
