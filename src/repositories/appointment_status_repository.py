"""Appointment status store keyed by booking URL."""

import json
import logging
from typing import Any, Dict, List, Optional, Union

from src.core.enums import BookingStatus
from src.models.database import Database
from src.models.schemas import PATIENT_FIELDS, AppointmentRecord, PatientInfo
from src.repositories.base import BaseRepository
from src.repositories.clinician_repository import ClinicianRepository
from src.utils.helpers import extract_clinician_id
from src.utils.masking import mask_name

logger = logging.getLogger(__name__)

# Identity columns are NOT NULL DEFAULT '' in the schema
_REQUIRED_TEXT_FIELDS = frozenset(
    {
        "first_name",
        "middle_name",
        "last_name",
        "preferred_name",
        "date_of_birth",
        "phone",
        "email",
        "comments",
    }
)

# A booked record never leaves the booked state
_NEXT_STATUS_SQL = "CASE WHEN t.status = 'booked' THEN t.status ELSE EXCLUDED.status END"

# $1 href, $2 clinician_id, $3 clinician_name, $4 status, $5 log message,
# then one parameter per patient field starting at $6
_FIELD_PARAM_OFFSET = 6


def _field_param(index: int) -> str:
    return f"${index + _FIELD_PARAM_OFFSET}::text"


def _build_upsert_query() -> str:
    """
    Build the single upsert statement used for both creation and update.

    Supplied patient fields overwrite stored ones, ``NULL`` parameters keep
    the stored value. The ``WHERE`` clause turns an identical re-upsert into a
    no-op, and a processing log entry is appended only on insert or when the
    status actually changes.
    """
    columns = ", ".join(PATIENT_FIELDS)
    insert_values = ", ".join(
        f"COALESCE({_field_param(i)}, '')" if name in _REQUIRED_TEXT_FIELDS else _field_param(i)
        for i, name in enumerate(PATIENT_FIELDS)
    )
    merged = [f"COALESCE({_field_param(i)}, t.{name})" for i, name in enumerate(PATIENT_FIELDS)]
    set_fields = ",\n            ".join(
        f"{name} = {expr}" for name, expr in zip(PATIENT_FIELDS, merged)
    )
    merged_name = "COALESCE(NULLIF(EXCLUDED.clinician_name, ''), t.clinician_name)"
    log_entry = (
        "jsonb_build_array(jsonb_build_object("
        "'status', {status}, 'timestamp', now(), 'message', $5::text))"
    )

    return f"""
        INSERT INTO appointment_statuses AS t (
            href, clinician_id, clinician_name, status, {columns},
            submitted_at, created_at, updated_at, processing_log
        )
        VALUES (
            $1, $2, $3, $4, {insert_values},
            now(), now(), now(), {log_entry.format(status="$4::text")}
        )
        ON CONFLICT (href) DO UPDATE SET
            clinician_id = EXCLUDED.clinician_id,
            clinician_name = {merged_name},
            status = {_NEXT_STATUS_SQL},
            {set_fields},
            processing_log = CASE
                WHEN t.status IS DISTINCT FROM ({_NEXT_STATUS_SQL})
                THEN t.processing_log || {log_entry.format(status=f"({_NEXT_STATUS_SQL})")}
                ELSE t.processing_log
            END,
            updated_at = now()
        WHERE (
            EXCLUDED.clinician_id, {merged_name}, {_NEXT_STATUS_SQL}, {", ".join(merged)}
        ) IS DISTINCT FROM (
            t.clinician_id, t.clinician_name, t.status, {", ".join("t." + n for n in PATIENT_FIELDS)}
        )
        RETURNING *
    """


_UPSERT_QUERY = _build_upsert_query()


class AppointmentStatusRepository(BaseRepository[AppointmentRecord]):
    """Durable record of booking attempts, one row per appointment URL."""

    def __init__(self, database: Database, clinicians: Optional[ClinicianRepository] = None):
        """
        Initialize appointment status repository.

        Args:
            database: Database instance
            clinicians: Directory used to resolve clinician names
        """
        super().__init__(database)
        self.clinicians = clinicians or ClinicianRepository(database)

    def _row_to_record(self, row: Any) -> AppointmentRecord:
        """
        Convert database row to AppointmentRecord.

        Args:
            row: Database row

        Returns:
            AppointmentRecord entity
        """
        data: Dict[str, Any] = dict(row)
        log = data.get("processing_log")
        if isinstance(log, str):
            log = json.loads(log)
        data["processing_log"] = log or []
        for name in _REQUIRED_TEXT_FIELDS | {"clinician_id", "clinician_name"}:
            if data.get(name) is None:
                data[name] = ""
        return AppointmentRecord.model_validate(data)

    async def upsert(
        self,
        href: str,
        patient: Union[PatientInfo, Dict[str, Any], None],
        status: Union[BookingStatus, str] = BookingStatus.UNKNOWN,
        message: Optional[str] = None,
    ) -> AppointmentRecord:
        """
        Create or update the record for a booking URL.

        Args:
            href: Appointment booking URL (unique key)
            patient: Patient fields to merge; ``None`` values keep stored data
            status: Status to record
            message: Optional note for the processing log

        Returns:
            The stored record after the upsert
        """
        if not isinstance(patient, PatientInfo):
            patient = PatientInfo.model_validate(patient or {})
        status = BookingStatus(status)

        clinician_id = extract_clinician_id(href)
        clinician_name = await self.clinicians.get_name(clinician_id) or ""
        values = patient.to_db_values()

        async with self.db.get_connection() as conn:
            row = await conn.fetchrow(
                _UPSERT_QUERY,
                href,
                clinician_id,
                clinician_name,
                status.value,
                message,
                *(values[name] for name in PATIENT_FIELDS),
            )
            if row is None:
                # Nothing changed, the conflict branch was skipped
                row = await conn.fetchrow(
                    "SELECT * FROM appointment_statuses WHERE href = $1", href
                )

        if row is None:
            raise LookupError(f"Appointment record vanished during upsert: {href}")

        record = self._row_to_record(row)
        logger.info(
            f"Recorded appointment for {mask_name(record.first_name, record.last_name)} "
            f"with status: {record.status.value}"
        )
        return record

    async def find(self, href: str) -> Optional[AppointmentRecord]:
        """
        Get the record for a booking URL.

        Args:
            href: Appointment booking URL

        Returns:
            AppointmentRecord or None if not found
        """
        async with self.db.get_connection() as conn:
            row = await conn.fetchrow("SELECT * FROM appointment_statuses WHERE href = $1", href)
            if row is None:
                return None
            return self._row_to_record(row)

    async def find_all_by_status(
        self, status: Union[BookingStatus, str]
    ) -> List[AppointmentRecord]:
        """
        Get all records in a status, oldest first.

        Args:
            status: Status to filter by

        Returns:
            List of AppointmentRecord entities
        """
        async with self.db.get_connection() as conn:
            rows = await conn.fetch(
                "SELECT * FROM appointment_statuses WHERE status = $1 "
                "ORDER BY created_at ASC, id ASC",
                BookingStatus(status).value,
            )
            return [self._row_to_record(row) for row in rows]

    async def list_all(self, limit: int = 100) -> List[AppointmentRecord]:
        """
        Get all records, newest first.

        Args:
            limit: Maximum number of records to return

        Returns:
            List of AppointmentRecord entities
        """
        async with self.db.get_connection() as conn:
            rows = await conn.fetch(
                "SELECT * FROM appointment_statuses ORDER BY created_at DESC, id DESC LIMIT $1",
                limit,
            )
            return [self._row_to_record(row) for row in rows]

    async def mark_attempt(self, href: str, error: Optional[str]) -> None:
        """
        Record the outcome of a reconciliation attempt.

        Args:
            href: Appointment booking URL
            error: Diagnostic of the failed attempt, or None to clear it
        """
        async with self.db.get_connection() as conn:
            result = await conn.execute(
                """
                UPDATE appointment_statuses
                SET last_attempt_at = now(), last_error = $2, updated_at = now()
                WHERE href = $1
                """,
                href,
                error,
            )
        if result == "UPDATE 0":
            logger.warning(f"mark_attempt: no record for {href}")
