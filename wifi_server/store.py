"""
In-memory device registry and command queue.

All state lives in a RegistryCoordinator instance owned by the
application. Route handlers receive it through a dependency and never
touch the underlying maps directly.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "idle"
UNKNOWN = "unknown"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class RegistryError(Exception):
    """Base class for recoverable registry failures."""


class InvalidInput(RegistryError):
    """A required field (device id or command text) is missing or empty."""


class DeviceNotFound(RegistryError):
    """The operation requires a registered device and none exists."""

    def __init__(self, device_id: str):
        super().__init__(f"Device '{device_id}' not registered")
        self.device_id = device_id


@dataclass
class Device:
    device_id: str
    registered_at: datetime
    last_seen: datetime
    ip: str = UNKNOWN


@dataclass
class StatusFields:
    """Fields a device may report in a status update."""

    status: str = DEFAULT_STATUS
    recording: bool = False
    screen_recording: bool = False


@dataclass
class StatusRecord:
    status: str
    recording: bool
    screen_recording: bool
    last_updated: datetime
    ip: str = UNKNOWN


@dataclass
class DeviceSummary:
    """Admin view of one device, joined across all stores."""

    device_id: str
    registered_at: datetime
    last_seen: datetime
    status: str
    recording: bool
    screen_recording: bool
    pending_commands: int
    ip: str


@dataclass
class DrainResult:
    device_id: str
    commands: List[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=_now)

    @property
    def count(self) -> int:
        return len(self.commands)


class DeviceRegistry:
    """Identity and heartbeat metadata per device id."""

    def __init__(self) -> None:
        self._devices: Dict[str, Device] = {}

    def register(self, device_id: str, ip: Optional[str] = None) -> Device:
        if not device_id:
            raise InvalidInput("Device ID is required")
        now = _now()
        device = Device(
            device_id=device_id,
            registered_at=now,
            last_seen=now,
            ip=ip or UNKNOWN,
        )
        self._devices[device_id] = device
        return replace(device)

    def touch_last_seen(self, device_id: str) -> None:
        device = self._devices.get(device_id)
        if device is not None:
            device.last_seen = _now()

    def exists(self, device_id: str) -> bool:
        return device_id in self._devices

    def get(self, device_id: str) -> Optional[Device]:
        device = self._devices.get(device_id)
        return replace(device) if device is not None else None

    def list(self) -> List[Device]:
        return [replace(device) for device in self._devices.values()]


class CommandQueue:
    """
    FIFO of pending command strings per device.

    Only registered devices may have commands queued or drained; the
    registry is consulted for every such check.
    """

    def __init__(self, registry: DeviceRegistry) -> None:
        self._registry = registry
        self._queues: Dict[str, List[str]] = {}

    def ensure_queue(self, device_id: str) -> None:
        self._queues.setdefault(device_id, [])

    def _require_device(self, device_id: str) -> None:
        if not self._registry.exists(device_id):
            raise DeviceNotFound(device_id)

    def enqueue(self, device_id: str, command: str) -> int:
        self._require_device(device_id)
        if not command:
            raise InvalidInput("Command is required")
        queue = self._queues.setdefault(device_id, [])
        queue.append(command)
        return len(queue)

    def drain(self, device_id: str) -> Tuple[List[str], int]:
        self._require_device(device_id)
        commands = self._queues.get(device_id, [])
        self._queues[device_id] = []
        return commands, len(commands)

    def pending_count(self, device_id: str) -> int:
        return len(self._queues.get(device_id, ()))

    def clear(self, device_id: str) -> None:
        self._require_device(device_id)
        self._queues[device_id] = []


class StatusTracker:
    """Last reported operational status per device id."""

    def __init__(self) -> None:
        self._records: Dict[str, StatusRecord] = {}

    def update(
        self,
        device_id: str,
        fields: Optional[StatusFields] = None,
        ip: Optional[str] = None,
    ) -> StatusRecord:
        fields = fields or StatusFields()
        record = StatusRecord(
            status=fields.status,
            recording=fields.recording,
            screen_recording=fields.screen_recording,
            last_updated=_now(),
            ip=ip or UNKNOWN,
        )
        self._records[device_id] = record
        return replace(record)

    def get(self, device_id: str) -> Optional[StatusRecord]:
        record = self._records.get(device_id)
        return replace(record) if record is not None else None


class RegistryCoordinator:
    """
    Atomic facade over the device registry, command queues and status.

    Every public method runs under a single lock, so each operation is
    observed as one indivisible step by concurrent request handlers.
    In particular a drain returns exactly the commands queued before it
    and leaves later enqueues for the next poll.
    """

    def __init__(
        self,
        registry: Optional[DeviceRegistry] = None,
        statuses: Optional[StatusTracker] = None,
    ) -> None:
        self._registry = registry or DeviceRegistry()
        self._queue = CommandQueue(self._registry)
        self._statuses = statuses or StatusTracker()
        self._lock = threading.RLock()

    def register_device(self, device_id: str, ip: Optional[str] = None) -> Device:
        """Create or replace a device; its pending commands survive."""
        with self._lock:
            device = self._registry.register(device_id, ip)
            self._queue.ensure_queue(device_id)
        logger.info(f"Device registered: {device_id}")
        return device

    def update_status(
        self,
        device_id: str,
        fields: Optional[StatusFields] = None,
        ip: Optional[str] = None,
    ) -> StatusRecord:
        """
        Record a status report.

        Accepted for unregistered ids too; it does not register the
        device, and last_seen is only refreshed for known devices.
        """
        if not device_id:
            raise InvalidInput("Device ID is required")
        with self._lock:
            record = self._statuses.update(device_id, fields, ip)
            if self._registry.exists(device_id):
                self._registry.touch_last_seen(device_id)
        logger.info(f"Status updated - Device: {device_id}, Status: {record.status}")
        return record

    def poll_commands(self, device_id: str) -> DrainResult:
        with self._lock:
            if not self._registry.exists(device_id):
                raise DeviceNotFound(device_id)
            self._registry.touch_last_seen(device_id)
            commands, count = self._queue.drain(device_id)
        logger.info(f"Sending {count} commands to device {device_id}")
        return DrainResult(device_id=device_id, commands=commands)

    def send_command(self, device_id: str, command: str) -> int:
        """Queue a command and return the device's new pending count."""
        if not device_id or not command:
            raise InvalidInput("Device ID and command are required")
        with self._lock:
            pending = self._queue.enqueue(device_id, command)
        logger.info(f"Command sent - Device: {device_id}, Command: {command}")
        return pending

    def pending_count(self, device_id: str) -> int:
        with self._lock:
            return self._queue.pending_count(device_id)

    def list_devices(self) -> List[DeviceSummary]:
        with self._lock:
            summaries = []
            for device in self._registry.list():
                record = self._statuses.get(device.device_id)
                summaries.append(
                    DeviceSummary(
                        device_id=device.device_id,
                        registered_at=device.registered_at,
                        last_seen=device.last_seen,
                        status=record.status if record else UNKNOWN,
                        recording=record.recording if record else False,
                        screen_recording=record.screen_recording if record else False,
                        pending_commands=self._queue.pending_count(device.device_id),
                        ip=device.ip,
                    )
                )
            return summaries

    def clear_commands(self, device_id: str) -> None:
        with self._lock:
            self._queue.clear(device_id)
        logger.info(f"Commands cleared for device: {device_id}")

    def get_device(self, device_id: str) -> Optional[Device]:
        with self._lock:
            return self._registry.get(device_id)

    def get_status(self, device_id: str) -> Optional[StatusRecord]:
        with self._lock:
            return self._statuses.get(device_id)
