"""
Mock Notification Service

Simulates sending e-challan and warning notices by email/SMS through a
backend provider. Delivery is simulated with a fixed latency.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, Field

from trafficguard.models import NotificationKind, VehicleOwner


class NotificationPayload(BaseModel):
    """Notice content sent to the vehicle owner"""
    kind: NotificationKind
    plate_number: str
    amount: Optional[float] = None
    violations: List[str] = Field(default_factory=list)
    challan_id: Optional[str] = None


@dataclass
class SentNotification:
    recipient: VehicleOwner
    payload: NotificationPayload
    sent_at: float = field(default_factory=time.time)


class MockNotificationService:
    """
    Email/SMS notification collaborator

    ``send`` returns True on delivery. ``fail_next`` lets demos and tests
    simulate a provider outage.
    """

    def __init__(self, config: dict = None):
        """
        Args:
            config: Notification configuration (latency)
        """
        self.config = config or {}
        self.latency = float(self.config.get('latency', 2.0))

        self.sent: List[SentNotification] = []
        self.fail_next = False

        print("[NOTIFY] Notification service initialized")

    async def send(self, recipient: VehicleOwner, payload: NotificationPayload) -> bool:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

        if self.fail_next:
            self.fail_next = False
            print(f"[NOTIFY] Delivery failed for {payload.kind.value} to {recipient.email}")
            return False

        print(f"[NOTIFY] Sending {payload.kind.value} to {recipient.email or recipient.name}...")
        self.sent.append(SentNotification(recipient=recipient, payload=payload))
        return True
