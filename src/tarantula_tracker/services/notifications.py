"""Per-owner care evaluation and alert dispatch."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol
from uuid import UUID

from tarantula_tracker.domain.care import (
    CareSubject,
    FeedingRecord,
    GroupMembership,
    MaintenanceSchedule,
    MoltRecord,
    SpeciesProfile,
)
from tarantula_tracker.domain.models import OwnerRecord
from tarantula_tracker.domain.notifications import (
    AlertPayload,
    FeedingAlert,
    MoltAlert,
    NotificationPreferences,
)
from tarantula_tracker.services import feeding, molts
from tarantula_tracker.services.eligibility import (
    DEFAULT_WINDOW_SECONDS,
    should_notify,
)
from tarantula_tracker.services.intervals import IntervalCatalog, lookup_interval
from tarantula_tracker.services.maintenance import check_maintenance
from tarantula_tracker.services.preferences import PreferencesService
from tarantula_tracker.timeutils import as_utc

logger = logging.getLogger(__name__)


class CareRepository(Protocol):
    """Persistence interface for animals and their care records."""

    def list_subjects(self, owner_id: UUID) -> list[CareSubject]:
        """Return the owner's living animals."""

    def list_direct_feedings(self, subject_id: UUID) -> list[FeedingRecord]:
        """Return feedings logged for a single animal."""

    def list_communal_feedings(self, group_id: UUID) -> list[FeedingRecord]:
        """Return feedings logged for a communal group."""

    def list_memberships(self, subject_id: UUID) -> list[GroupMembership]:
        """Return the animal's group membership windows."""

    def list_molt_history(self, subject_id: UUID) -> list[MoltRecord]:
        """Return the animal's molts ordered by date."""

    def get_species_profile(self, species_id: int) -> SpeciesProfile | None:
        """Return the species profile, if known."""

    def list_maintenance_schedules(self, owner_id: UUID) -> list[MaintenanceSchedule]:
        """Return upkeep schedules for the owner's groups."""


class AlertDispatcher(Protocol):
    """Delivers a rendered alert payload to an owner."""

    async def dispatch(self, owner: OwnerRecord, payload: AlertPayload) -> None:
        """Send the payload to the owner."""


def post_molt_muted_until(
    subject: CareSubject,
    history: Sequence[MoltRecord],
    mute_days: int,
) -> datetime | None:
    """Return the end of the feeding mute window, if one applies."""
    candidates = []
    if subject.feeding_muted_until is not None:
        candidates.append(as_utc(subject.feeding_muted_until))
    molt_dates = [as_utc(record.molted_at) for record in history]
    if subject.last_molt_at is not None:
        molt_dates.append(as_utc(subject.last_molt_at))
    if molt_dates and mute_days > 0:
        candidates.append(max(molt_dates) + timedelta(days=mute_days))
    return max(candidates, default=None)


@dataclass
class CareNotificationService:
    """Evaluate an owner's animals and hand alerts to the dispatcher."""

    care_repository: CareRepository
    preferences_service: PreferencesService
    dispatcher: AlertDispatcher
    interval_catalog: IntervalCatalog

    def build_payload(
        self,
        owner: OwnerRecord,
        preferences: NotificationPreferences,
        now: datetime,
    ) -> AlertPayload:
        """Run every enabled check for the owner without sending anything."""
        payload = AlertPayload(
            owner_id=owner.id, chat_id=owner.chat_id, generated_at=now
        )
        for subject in self.care_repository.list_subjects(owner.id):
            try:
                self._check_subject(subject, preferences, now, payload)
            except Exception:
                logger.exception(
                    "Failed to evaluate subject", extra={"subject_id": str(subject.id)}
                )
        if preferences.maintenance_reminders_enabled:
            try:
                schedules = self.care_repository.list_maintenance_schedules(owner.id)
            except Exception:
                logger.exception(
                    "Failed to load maintenance schedules",
                    extra={"owner_id": str(owner.id)},
                )
            else:
                payload.maintenance.extend(check_maintenance(schedules, now))
        return payload

    async def evaluate_owner(
        self,
        owner: OwnerRecord,
        preferences: NotificationPreferences,
        now: datetime,
    ) -> AlertPayload:
        """Evaluate the owner now and dispatch any alerts."""
        payload = await asyncio.to_thread(self.build_payload, owner, preferences, now)
        if payload.is_empty:
            return payload
        try:
            await self.dispatcher.dispatch(owner, payload)
        except Exception:
            logger.exception(
                "Failed to dispatch alerts", extra={"owner_id": str(owner.id)}
            )
        return payload

    async def process_owner(
        self,
        owner: OwnerRecord,
        now: datetime,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
    ) -> AlertPayload | None:
        """Evaluate the owner if their preferences allow it on this tick."""
        preferences = await asyncio.to_thread(self.preferences_service.get, owner.id)
        preferences = await asyncio.to_thread(
            self.preferences_service.clear_expired_pause, preferences, now
        )
        if not should_notify(now, preferences, window_seconds):
            return None
        return await self.evaluate_owner(owner, preferences, now)

    def _check_subject(
        self,
        subject: CareSubject,
        preferences: NotificationPreferences,
        now: datetime,
        payload: AlertPayload,
    ) -> None:
        repository = self.care_repository
        direct = repository.list_direct_feedings(subject.id)
        memberships = repository.list_memberships(subject.id)
        communal: list[FeedingRecord] = []
        for group_id in {membership.group_id for membership in memberships}:
            communal.extend(repository.list_communal_feedings(group_id))
        history = repository.list_molt_history(subject.id)
        profile = self.interval_catalog.profile(subject.species_id)

        interval = lookup_interval(profile, subject.current_size_cm)
        assessment = feeding.classify(
            subject,
            direct,
            communal,
            memberships,
            interval,
            now,
            muted_until=post_molt_muted_until(
                subject, history, preferences.post_molt_mute_days
            ),
        )
        if assessment.status.needs_feeding:
            payload.feeding.append(
                FeedingAlert(
                    subject_name=subject.name,
                    species_name=subject.species_name,
                    status=assessment.status,
                    days_since_feeding=assessment.days_since_feeding,
                    min_days=interval.min_days,
                    max_days=interval.max_days,
                )
            )

        if not preferences.molt_predictions_enabled:
            return
        records = feeding.merge_feedings(direct, communal, memberships)
        signal = feeding.summarize_feeding_behavior(records, now)
        prediction = molts.estimate(subject, history, profile, signal, now)
        if (
            prediction.days_until is not None
            and 0 <= prediction.days_until <= preferences.molt_alert_days
        ):
            payload.molts.append(
                MoltAlert(subject_name=subject.name, prediction=prediction)
            )
