"""Supabase repository for animals, feedings, molts and species data."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from tarantula_tracker.domain.care import (
    CareSubject,
    FeedingOutcome,
    FeedingRecord,
    GroupMembership,
    LifecycleStage,
    MaintenanceSchedule,
    MoltRecord,
    SizeBand,
    SpeciesProfile,
)
from tarantula_tracker.services.notifications import CareRepository
from tarantula_tracker.timeutils import parse_timestamp

_SUBJECT_COLUMNS = (
    "id, owner_id, name, species_id, current_size_cm, molt_stage, group_id, "
    "last_molt_at, estimated_age_months, feeding_muted_until, "
    "species(scientific_name)"
)
_FEEDING_COLUMNS = "id, tarantula_id, group_id, fed_at, outcome, prey_count"


@dataclass
class SupabaseCareRepository(CareRepository):
    """Supabase implementation for care record queries."""

    client: Client

    def list_subjects(self, owner_id: UUID) -> list[CareSubject]:
        """Return the owner's living tarantulas."""
        response = (
            self.client.table("tarantulas")
            .select(_SUBJECT_COLUMNS)
            .eq("owner_id", str(owner_id))
            .eq("is_deceased", False)
            .order("name", desc=False)
            .execute()
        )
        return [_parse_subject(row) for row in response.data or []]

    def list_direct_feedings(self, subject_id: UUID) -> list[FeedingRecord]:
        """Return feedings logged for a single tarantula."""
        response = (
            self.client.table("feeding_events")
            .select(_FEEDING_COLUMNS)
            .eq("tarantula_id", str(subject_id))
            .order("fed_at", desc=True)
            .execute()
        )
        return _parse_feedings(response.data or [])

    def list_communal_feedings(self, group_id: UUID) -> list[FeedingRecord]:
        """Return feedings logged for a communal group."""
        response = (
            self.client.table("feeding_events")
            .select(_FEEDING_COLUMNS)
            .eq("group_id", str(group_id))
            .order("fed_at", desc=True)
            .execute()
        )
        return _parse_feedings(response.data or [])

    def list_memberships(self, subject_id: UUID) -> list[GroupMembership]:
        """Return group membership windows for a tarantula."""
        response = (
            self.client.table("group_memberships")
            .select("tarantula_id, group_id, joined_at, left_at")
            .eq("tarantula_id", str(subject_id))
            .execute()
        )
        memberships = []
        for row in response.data or []:
            joined_at = parse_timestamp(row.get("joined_at"))
            if joined_at is None:
                continue
            memberships.append(
                GroupMembership(
                    subject_id=UUID(str(row["tarantula_id"])),
                    group_id=UUID(str(row["group_id"])),
                    joined_at=joined_at,
                    left_at=parse_timestamp(row.get("left_at")),
                )
            )
        return memberships

    def list_molt_history(self, subject_id: UUID) -> list[MoltRecord]:
        """Return recorded molts, oldest first."""
        response = (
            self.client.table("molt_records")
            .select(
                "id, tarantula_id, molted_at, pre_molt_length_cm, "
                "post_molt_length_cm, successful"
            )
            .eq("tarantula_id", str(subject_id))
            .order("molted_at", desc=False)
            .execute()
        )
        records = []
        for row in response.data or []:
            molted_at = parse_timestamp(row.get("molted_at"))
            if molted_at is None:
                continue
            records.append(
                MoltRecord(
                    id=UUID(str(row["id"])),
                    subject_id=UUID(str(row["tarantula_id"])),
                    molted_at=molted_at,
                    pre_molt_length_cm=_optional_float(row.get("pre_molt_length_cm")),
                    post_molt_length_cm=_optional_float(
                        row.get("post_molt_length_cm")
                    ),
                    successful=bool(row.get("successful", True)),
                )
            )
        return records

    def get_species_profile(self, species_id: int) -> SpeciesProfile | None:
        """Return species reference data with its feeding bands."""
        response = (
            self.client.table("species")
            .select("id, scientific_name, common_name, adult_size_cm, temperament")
            .eq("id", species_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        bands_response = (
            self.client.table("species_feeding_bands")
            .select("size_category, max_size_cm, min_days, max_days")
            .eq("species_id", species_id)
            .order("max_size_cm", desc=False)
            .execute()
        )
        bands = tuple(
            SizeBand(
                category=str(band.get("size_category") or ""),
                max_size_cm=float(band["max_size_cm"]),
                min_days=int(band["min_days"]),
                max_days=int(band["max_days"]),
            )
            for band in bands_response.data or []
        )
        return SpeciesProfile(
            id=int(row["id"]),
            scientific_name=str(row.get("scientific_name") or ""),
            common_name=row.get("common_name"),
            adult_size_cm=_optional_float(row.get("adult_size_cm")),
            temperament=row.get("temperament"),
            size_bands=bands,
        )

    def list_maintenance_schedules(self, owner_id: UUID) -> list[MaintenanceSchedule]:
        """Return upkeep schedules for the owner's groups."""
        response = (
            self.client.table("group_maintenance")
            .select(
                "group_id, task, frequency_days, last_performed_at, "
                "communal_groups(name)"
            )
            .eq("owner_id", str(owner_id))
            .execute()
        )
        schedules = []
        for row in response.data or []:
            group = row.get("communal_groups") or {}
            schedules.append(
                MaintenanceSchedule(
                    group_id=UUID(str(row["group_id"])),
                    group_name=str(group.get("name") or "Unnamed group"),
                    task=str(row.get("task") or ""),
                    frequency_days=int(row.get("frequency_days") or 0),
                    last_performed_at=parse_timestamp(row.get("last_performed_at")),
                )
            )
        return schedules


def _optional_float(raw: object) -> float | None:
    if raw is None:
        return None
    return float(raw)


def _optional_uuid(raw: object) -> UUID | None:
    if not raw:
        return None
    return UUID(str(raw))


def _parse_subject(row: dict[str, object]) -> CareSubject:
    species = row.get("species") or {}
    age = row.get("estimated_age_months")
    return CareSubject(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["owner_id"])),
        name=str(row.get("name") or ""),
        species_id=int(row["species_id"]) if row.get("species_id") else None,
        species_name=species.get("scientific_name"),
        current_size_cm=_optional_float(row.get("current_size_cm")),
        stage=LifecycleStage.parse(row.get("molt_stage")),
        group_id=_optional_uuid(row.get("group_id")),
        last_molt_at=parse_timestamp(row.get("last_molt_at")),
        estimated_age_months=int(age) if age is not None else None,
        feeding_muted_until=parse_timestamp(row.get("feeding_muted_until")),
    )


def _parse_feedings(rows: list[dict[str, object]]) -> list[FeedingRecord]:
    records = []
    for row in rows:
        fed_at = parse_timestamp(row.get("fed_at"))
        if fed_at is None:
            continue
        records.append(
            FeedingRecord(
                id=UUID(str(row["id"])),
                fed_at=fed_at,
                outcome=FeedingOutcome.parse(row.get("outcome")),
                subject_id=_optional_uuid(row.get("tarantula_id")),
                group_id=_optional_uuid(row.get("group_id")),
                prey_count=int(row.get("prey_count") or 1),
            )
        )
    return records
