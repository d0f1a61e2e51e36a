"""
E-Challan and Vehicle Lookup Package

Components:
- MockVehicleRegistry: Mock RTO vehicle records
- MockNotificationService: Simulated email/SMS delivery
- NotificationDispatcher: Warning / e-challan issuance and status update

Usage:
    from trafficguard.challan import (
        MockVehicleRegistry,
        MockNotificationService,
        NotificationDispatcher,
    )

    registry = MockVehicleRegistry(config)
    dispatcher = NotificationDispatcher(history, MockNotificationService(config))
    outcome = await dispatcher.dispatch(record_id, NotificationKind.CHALLAN)
"""

from .vehicle_registry import (
    SEEDED_VEHICLES,
    MockVehicleRegistry,
    normalize_plate,
)
from .notification_service import (
    NotificationPayload,
    SentNotification,
    MockNotificationService,
)
from .dispatcher import (
    DispatchOutcome,
    NotificationDispatcher,
)


__all__ = [
    # Vehicle lookup
    "SEEDED_VEHICLES",
    "MockVehicleRegistry",
    "normalize_plate",

    # Notification delivery
    "NotificationPayload",
    "SentNotification",
    "MockNotificationService",

    # Dispatch
    "DispatchOutcome",
    "NotificationDispatcher",
]
