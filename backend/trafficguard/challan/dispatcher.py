"""
Notification Dispatcher

Officer actions on a scan: issue a warning or an e-challan to the
vehicle owner, then move the scan record to VERIFIED / CHALLAN_SENT.

- Records are addressed by id
- A record that already reached the target status is not notified
  again unless the officer forces it
- Delivery failure leaves history untouched and raises DispatchError
- The desktop-style alert is fire-and-forget
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Set

from trafficguard.errors import DispatchError, RecordNotFoundError
from trafficguard.models import NotificationKind, ScanRecord, ScanStatus

from .notification_service import NotificationPayload


DesktopAlert = Callable[[str, str], Awaitable[None]]


@dataclass
class DispatchOutcome:
    """Result of a dispatch request"""
    record: ScanRecord
    kind: NotificationKind
    sent: bool
    challan_id: Optional[str] = None

    @property
    def message(self) -> str:
        owner = self.record.vehicle.owner.name if self.record.vehicle else "owner"
        if not self.sent:
            return f"{self.kind.value.title()} already issued for this scan"
        if self.kind == NotificationKind.CHALLAN:
            return f"E-Challan sent to {owner}"
        return f"Warning sent to {owner}"


class NotificationDispatcher:
    """
    Send warnings / e-challans and update scan status

    Usage:
        dispatcher = NotificationDispatcher(history, notification_service,
                                            desktop_alert=emitter.emit_desktop_notification)
        outcome = await dispatcher.dispatch(record_id, NotificationKind.CHALLAN)
    """

    def __init__(self, history, sender, desktop_alert: Optional[DesktopAlert] = None):
        """
        Args:
            history: ScanHistoryStore holding the records
            sender: Notification collaborator with ``async send(recipient, payload) -> bool``
            desktop_alert: Async callable(title, body) for the local alert
        """
        self.history = history
        self.sender = sender
        self.desktop_alert = desktop_alert

        self._in_flight: Set[str] = set()
        self._alert_tasks: Set[asyncio.Task] = set()
        self.challan_counter = self._max_challan_number()

    def sync_challan_counter(self):
        """Continue numbering after the highest challan id in history (call after load)"""
        self.challan_counter = max(self.challan_counter, self._max_challan_number())

    def _max_challan_number(self) -> int:
        numbers = [
            int(r.challan_id.split('-')[1])
            for r in self.history.records
            if r.challan_id and r.challan_id.startswith('CH-') and r.challan_id[3:].isdigit()
        ]
        return max(numbers, default=0)

    @staticmethod
    def already_actioned(record: ScanRecord, kind: NotificationKind) -> bool:
        """True when this action would not change the record"""
        if record.status == kind.target_status:
            return True
        # A warning never downgrades an issued challan
        return kind == NotificationKind.WARNING and record.status == ScanStatus.CHALLAN_SENT

    async def dispatch(self, record_id: str, kind: NotificationKind,
                       force: bool = False) -> DispatchOutcome:
        """
        Notify the owner of a scanned vehicle

        Args:
            record_id: ScanRecord.id chosen by the officer
            kind: WARNING or CHALLAN
            force: Re-send even if the record was already actioned

        Raises:
            RecordNotFoundError: unknown record
            DispatchError: delivery failed (history unchanged)
        """
        record = self.history.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"Scan record {record_id} not found")

        if record_id in self._in_flight or (not force and self.already_actioned(record, kind)):
            print(f"[NOTIFY] {kind.value} for {record_id} skipped (already issued or in progress)")
            return DispatchOutcome(record=record, kind=kind, sent=False, challan_id=record.challan_id)

        if record.vehicle is None:
            raise DispatchError("No owner contact for this scan")

        self._in_flight.add(record_id)
        try:
            challan_id = self._next_challan_id() if kind == NotificationKind.CHALLAN else None
            payload = self._build_payload(record, kind, challan_id)

            try:
                delivered = await self.sender.send(record.vehicle.owner, payload)
            except Exception as e:
                print(f"[NOTIFY] Delivery error: {e}")
                self._release_challan_id(challan_id)
                raise DispatchError() from e

            if not delivered:
                self._release_challan_id(challan_id)
                raise DispatchError()

            updated = self.history.update_status(
                record_id,
                kind.target_status,
                challan_id=challan_id,
                notified=True,
            )
        finally:
            self._in_flight.discard(record_id)

        print(f"[NOTIFY] {kind.value} issued for {payload.plate_number}"
              + (f" ({challan_id}, ₹{payload.amount or 0:.0f})" if challan_id else ""))

        self._fire_desktop_alert(updated, payload)
        return DispatchOutcome(record=updated, kind=kind, sent=True, challan_id=challan_id)

    def _next_challan_id(self) -> str:
        self.challan_counter += 1
        return f"CH-{self.challan_counter:08d}"

    def _release_challan_id(self, challan_id: Optional[str]):
        """Hand back an undelivered number so failed sends leave no gap"""
        # Only the newest reservation can be returned without reordering
        if challan_id and challan_id == f"CH-{self.challan_counter:08d}":
            self.challan_counter -= 1

    @staticmethod
    def _build_payload(record: ScanRecord, kind: NotificationKind,
                       challan_id: Optional[str]) -> NotificationPayload:
        analysis = record.analysis
        return NotificationPayload(
            kind=kind,
            plate_number=record.vehicle.plate_number,
            amount=analysis.total_fine if (analysis and kind == NotificationKind.CHALLAN) else None,
            violations=analysis.violation_rules() if analysis else [],
            challan_id=challan_id,
        )

    def _fire_desktop_alert(self, record: ScanRecord, payload: NotificationPayload):
        if self.desktop_alert is None:
            return

        owner = record.vehicle.owner.name
        if payload.kind == NotificationKind.CHALLAN:
            title = f"E-Challan Issued: {payload.plate_number}"
            body = f"Fine: ₹{payload.amount or 0:.0f}. Sent to {owner}."
        else:
            title = f"Warning Issued: {payload.plate_number}"
            body = f"Violation Warning sent to {owner}."

        try:
            task = asyncio.create_task(self._deliver_alert(title, body))
        except RuntimeError as e:
            print(f"[NOTIFY] Desktop alert skipped: {e}")
            return
        self._alert_tasks.add(task)
        task.add_done_callback(self._alert_tasks.discard)

    async def _deliver_alert(self, title: str, body: str):
        try:
            await self.desktop_alert(title, body)
        except Exception as e:
            print(f"[NOTIFY] Desktop alert failed: {e}")
