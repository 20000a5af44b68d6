# ============================================================================
# src/clinical_intake/storage/supabase_store.py
# ============================================================================
"""
Supabase persistence backend

Wraps the supabase-py client. Queries are built with the table API

    client.table("labs").select("*").eq("patient_id", pid).order("test_date", desc=True)

and executed in the default thread pool so the event loop never blocks on
the synchronous HTTP call. Client errors and rows that do not convert back
into records surface as PersistenceError.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

from supabase import ClientOptions, create_client

from .base import PatientStore, PatientData, patient_payload
from ..records.lab import LabResultRecord
from ..utils.exceptions import ConfigurationError, PersistenceError, RecordNotFoundError

READ_ONLY_COLUMNS = ("id", "created_at", "updated_at")


class SupabasePatientStore(PatientStore):
    """supabase-py backed PatientStore."""

    def __init__(
        self,
        url: Optional[str],
        key: Optional[str],
        patients_table: str = "patients",
        labs_table: str = "labs",
        timeout: float = 30.0,
        client: Any = None
    ):
        super().__init__()
        if client is None and (not url or not key):
            raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY are required for the supabase backend")

        self.url = url
        self.key = key
        self.patients_table = patients_table
        self.labs_table = labs_table
        self.timeout = timeout
        self._client = client

    @property
    def client(self):
        """Lazy-initialize and return the Supabase client."""
        if self._client is None:
            try:
                self._client = create_client(
                    self.url,
                    self.key,
                    options=ClientOptions(postgrest_client_timeout=self.timeout),
                )
            except Exception as e:
                raise PersistenceError(f"Failed to create Supabase client: {e}") from e
            self.logger.info("Supabase client initialized")
        return self._client

    async def _execute(self, operation: str, build: Callable[[Any], Any]) -> List[Dict[str, Any]]:
        """Run `build(client).execute()` off the event loop and return the rows."""
        def run():
            return build(self.client).execute()

        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(None, run)
        except PersistenceError:
            raise
        except Exception as e:
            self.logger.error(f"Supabase error during {operation}: {e}")
            raise PersistenceError(f"Database error during {operation}: {e}") from e

        data = getattr(response, "data", None)
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    def _to_lab(self, row: Any, operation: str) -> LabResultRecord:
        try:
            return LabResultRecord.from_row(row)
        except (TypeError, ValueError, AttributeError) as e:
            raise PersistenceError(f"Unreadable lab row from {operation}: {e}") from e

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------
    async def create_patient(self, patient: PatientData) -> Dict[str, Any]:
        payload = patient_payload(patient)
        rows = await self._execute(
            "create_patient",
            lambda client: client.table(self.patients_table).insert(payload),
        )
        if not rows:
            raise PersistenceError("Patient insert returned no row")
        self.logger.info(f"Created patient {rows[0].get('id')}")
        return rows[0]

    async def update_patient(self, patient_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        changes = {k: v for k, v in data.items() if k not in READ_ONLY_COLUMNS}
        rows = await self._execute(
            "update_patient",
            lambda client: client.table(self.patients_table).update(changes).eq("id", patient_id),
        )
        if not rows:
            raise RecordNotFoundError(f"Patient {patient_id} not found", patient_id)
        return rows[0]

    async def get_patient_by_id(self, patient_id: str) -> Dict[str, Any]:
        rows = await self._execute(
            "get_patient_by_id",
            lambda client: client.table(self.patients_table).select("*").eq("id", patient_id),
        )
        if not rows:
            raise RecordNotFoundError(f"Patient {patient_id} not found", patient_id)
        return rows[0]

    # ------------------------------------------------------------------
    # Lab results
    # ------------------------------------------------------------------
    async def create_lab_result(self, record: LabResultRecord) -> LabResultRecord:
        payload = record.to_input()
        rows = await self._execute(
            "create_lab_result",
            lambda client: client.table(self.labs_table).insert(payload),
        )
        if not rows:
            raise PersistenceError(f"Lab insert for {record.test_name!r} returned no row")
        return self._to_lab(rows[0], "create_lab_result")

    async def _get_lab(self, lab_id: str) -> LabResultRecord:
        rows = await self._execute(
            "get_lab_result",
            lambda client: client.table(self.labs_table).select("*").eq("id", lab_id),
        )
        if not rows:
            raise RecordNotFoundError(f"Lab result {lab_id} not found", lab_id)
        return self._to_lab(rows[0], "get_lab_result")

    async def update_lab_result(self, lab_id: str, changes: Dict[str, Any]) -> LabResultRecord:
        updated = (await self._get_lab(lab_id)).apply_changes(changes)
        payload = updated.to_input()
        payload.pop("patient_id", None)

        rows = await self._execute(
            "update_lab_result",
            lambda client: client.table(self.labs_table).update(payload).eq("id", lab_id),
        )
        if not rows:
            raise RecordNotFoundError(f"Lab result {lab_id} not found", lab_id)
        return self._to_lab(rows[0], "update_lab_result")

    async def delete_lab_result(self, lab_id: str) -> None:
        rows = await self._execute(
            "delete_lab_result",
            lambda client: client.table(self.labs_table).delete().eq("id", lab_id),
        )
        if not rows:
            raise RecordNotFoundError(f"Lab result {lab_id} not found", lab_id)

    async def get_lab_results(self, patient_id: str) -> List[LabResultRecord]:
        rows = await self._execute(
            "get_lab_results",
            lambda client: (
                client.table(self.labs_table)
                .select("*")
                .eq("patient_id", patient_id)
                .order("test_date", desc=True)
            ),
        )
        return [self._to_lab(row, "get_lab_results") for row in rows]
