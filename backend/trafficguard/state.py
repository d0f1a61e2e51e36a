"""
Application State

Explicit store for the collaborators behind the API: one capture
session, one scan workflow, the history store and the AI service, wired
together once at startup. Routes read it through ``get_app_state`` so
tests can inject their own via ``set_app_state``.
"""

from typing import Optional

from trafficguard.analysis import AnalysisPipeline, GenAIClient, ScanWorkflow, TrafficAIService
from trafficguard.assistant import LegalAssistant
from trafficguard.auth import OfficerAuth
from trafficguard.capture import CaptureSession, RemoteCameraDevice
from trafficguard.challan import MockNotificationService, MockVehicleRegistry, NotificationDispatcher
from trafficguard.config import ConfigManager, get_config
from trafficguard.database import SlotStorage
from trafficguard.history import ScanHistoryStore


class AppState:
    """All long-lived collaborators for one officer device"""

    def __init__(
        self,
        config: ConfigManager,
        storage: Optional[SlotStorage] = None,
        ai_client: Optional[GenAIClient] = None,
        registry=None,
        notifier=None,
        emitter=None,
    ):
        """
        Wire the application

        Args:
            config: Configuration manager
            storage: Slot storage (None: in-memory history and session)
            ai_client: GenAI transport (default: from config and environment)
            registry: Vehicle registry (default: MockVehicleRegistry)
            notifier: Notification sender (default: MockNotificationService)
            emitter: WebSocketEmitter for real-time events (optional)
        """
        self.config = config
        self.storage = storage
        self.emitter = emitter

        analysis_config = config.get_analysis_config()
        storage_config = config.get_storage_config()

        self.ai_client = ai_client or GenAIClient(
            base_url=analysis_config.get('baseUrl'),
            timeout=float(analysis_config.get('requestTimeout', 60)),
        )
        self.ai_service = TrafficAIService(self.ai_client, analysis_config)

        self.registry = registry or MockVehicleRegistry(config.get_registry_config())
        self.notifier = notifier or MockNotificationService(config.get_notification_config())

        self.history = ScanHistoryStore(
            storage,
            slot=storage_config.get('historySlot', 'traffic_guard_history'),
            on_persistence_error=emitter.notify_persistence_error if emitter else None,
        )
        self.auth = OfficerAuth(storage, slot=storage_config.get('userSlot', 'traffic_guard_user'))

        self.device = RemoteCameraDevice()
        self.session = CaptureSession(
            self.device,
            config.get_capture_config(),
            hint_provider=self.ai_service.live_traffic_hint,
            listener=emitter.notify_capture_state if emitter else None,
        )
        self.pipeline = AnalysisPipeline(
            self.ai_service,
            self.registry,
            analysis_config,
            alert_sink=emitter.emit_critical_alert if emitter else None,
        )
        self.workflow = ScanWorkflow(
            self.session,
            self.pipeline,
            self.history,
            on_completed=emitter.emit_scan_completed if emitter else None,
            on_failed=emitter.emit_scan_failed if emitter else None,
        )
        self.dispatcher = NotificationDispatcher(
            self.history,
            self.notifier,
            desktop_alert=emitter.emit_desktop_notification if emitter else None,
        )
        self.assistant = LegalAssistant(self.ai_service)

    def restore(self):
        """Load persisted history and the signed-in officer"""
        count = self.history.load()
        self.dispatcher.sync_challan_counter()
        officer = self.auth.restore()
        print(f"[STATE] Restored {count} scan(s); officer: {officer.badge_number if officer else 'none'}")

    async def startup(self):
        await self.ai_client.initialize()

    async def shutdown(self):
        if self.workflow.in_progress:
            await self.workflow.cancel()
        await self.session.discard()
        await self.ai_client.close()


# Global state instance (initialized in main.py)
_app_state: Optional[AppState] = None


def init_app_state(config: Optional[ConfigManager] = None, storage: Optional[SlotStorage] = None,
                   emitter=None) -> AppState:
    """Create and register the global application state"""
    global _app_state
    _app_state = AppState(config or get_config(), storage=storage, emitter=emitter)
    return _app_state


def get_app_state() -> Optional[AppState]:
    """Get the global application state"""
    return _app_state


def set_app_state(state: Optional[AppState]):
    """Replace the global application state (tests)"""
    global _app_state
    _app_state = state
