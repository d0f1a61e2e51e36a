"""
Scan History Store

Newest-first log of completed scans, persisted to the history slot after
every mutation.

Mutations are serialized with a lock so concurrent request handlers
cannot lose updates. A failed durable save never rolls back memory: the
error is kept on ``last_persistence_error`` and reported through the
optional callback.
"""

import threading
from dataclasses import dataclass, asdict
from typing import Callable, List, Optional

from pydantic import ValidationError

from trafficguard.errors import PersistenceError, RecordNotFoundError
from trafficguard.models import ScanRecord, ScanStatus


DEFAULT_HISTORY_SLOT = "traffic_guard_history"


@dataclass
class HistoryStatistics:
    """Dashboard aggregates over the whole history"""
    total_scans: int
    flagged_count: int
    violation_count: int
    challans_sent: int
    total_fines: float
    compliance_rate: float

    def to_dict(self) -> dict:
        return asdict(self)


def compliance_rate(total: int, violating: int) -> float:
    """Percentage of scans without violations; 100 when nothing has been scanned"""
    if total == 0:
        return 100.0
    return (total - violating) / total * 100


class ScanHistoryStore:
    """
    Owner of all ScanRecords for the life of the application

    Records are never deleted individually; ``clear`` wipes everything.
    """

    def __init__(self, storage=None, slot: str = DEFAULT_HISTORY_SLOT,
                 on_persistence_error: Optional[Callable[[PersistenceError], None]] = None):
        """
        Args:
            storage: SlotStorage for durability (None keeps history in memory only)
            slot: Slot name for the serialized history list
            on_persistence_error: Called when a save fails
        """
        self.storage = storage
        self.slot = slot
        self.on_persistence_error = on_persistence_error

        self._records: List[ScanRecord] = []
        self._lock = threading.RLock()
        self.last_persistence_error: Optional[PersistenceError] = None

    # ============================================
    # Loading
    # ============================================

    def load(self) -> int:
        """Reload history from storage; corrupt data loads as empty"""
        if self.storage is None:
            return 0

        data = self.storage.load_json(self.slot, default=[])
        if not isinstance(data, list):
            print(f"[HISTORY] Unexpected data in '{self.slot}', starting empty")
            data = []

        records = []
        for item in data:
            try:
                records.append(ScanRecord.model_validate(item))
            except ValidationError:
                print("[HISTORY] Skipping unreadable scan record")

        with self._lock:
            self._records = records

        print(f"[HISTORY] Loaded {len(records)} scan records")
        return len(records)

    # ============================================
    # Reads
    # ============================================

    @property
    def records(self) -> List[ScanRecord]:
        """Snapshot of all records, newest first"""
        with self._lock:
            return list(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def get(self, record_id: str) -> Optional[ScanRecord]:
        with self._lock:
            for record in self._records:
                if record.id == record_id:
                    return record
        return None

    def filter(self, predicate: Callable[[ScanRecord], bool]) -> List[ScanRecord]:
        """Read-only view of the records matching ``predicate``"""
        with self._lock:
            return [r for r in self._records if predicate(r)]

    def filter_by_vehicle_type(self, vehicle_type: Optional[str]) -> List[ScanRecord]:
        """``None`` or ``'All'`` returns everything"""
        if not vehicle_type or vehicle_type == 'All':
            return self.records
        return self.filter(lambda r: r.vehicle_type == vehicle_type)

    def statistics(self) -> HistoryStatistics:
        with self._lock:
            records = list(self._records)

        total = len(records)
        # Dispatch changes status, never whether a scan had violations
        violating = sum(1 for r in records if r.has_violations)
        return HistoryStatistics(
            total_scans=total,
            flagged_count=sum(1 for r in records if r.status == ScanStatus.FLAGGED),
            violation_count=violating,
            challans_sent=sum(1 for r in records if r.status == ScanStatus.CHALLAN_SENT),
            total_fines=sum(r.total_fine for r in records),
            compliance_rate=compliance_rate(total, violating),
        )

    # ============================================
    # Mutations
    # ============================================

    def append(self, record: ScanRecord):
        """Add a record at the front (newest first)"""
        with self._lock:
            self._records.insert(0, record)
            self._persist()
        print(f"[HISTORY] Scan recorded: {record.id} ({record.status.value})")

    def update_status(self, record_id: str, status: ScanStatus,
                      challan_id: Optional[str] = None, notified: bool = False) -> ScanRecord:
        """
        Set a record's status by id

        Args:
            record_id: ScanRecord.id
            status: New status
            challan_id: Challan reference to attach (challans only)
            notified: Count one delivered notification

        Raises:
            RecordNotFoundError: unknown id
        """
        with self._lock:
            record = self.get(record_id)
            if record is None:
                raise RecordNotFoundError(f"Scan record {record_id} not found")

            record.status = status
            if challan_id:
                record.challan_id = challan_id
            if notified:
                record.notifications_sent += 1
            self._persist()
        return record

    def clear(self):
        """Wipe all records"""
        with self._lock:
            self._records = []
            self._persist()
        print("[HISTORY] History cleared")

    def _persist(self):
        if self.storage is None:
            return
        try:
            self.storage.save_json(
                self.slot,
                [r.model_dump(mode='json') for r in self._records],
            )
            self.last_persistence_error = None
        except PersistenceError as e:
            self.last_persistence_error = e
            print(f"[HISTORY] Persistence failed, keeping in-memory state: {e}")
            if self.on_persistence_error:
                self.on_persistence_error(e)
