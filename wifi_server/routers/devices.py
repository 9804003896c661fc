"""
Device routes - registration, status reports and command polling
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from wifi_server.dependencies import body_as, get_client_ip, get_coordinator
from wifi_server.models import (
    CommandsResponse,
    DeviceRegistration,
    DeviceRegistrationResponse,
    StatusUpdate,
    StatusUpdateResponse,
)
from wifi_server.store import (
    DeviceNotFound,
    InvalidInput,
    RegistryCoordinator,
    StatusFields,
)

router = APIRouter(tags=["Devices"])
logger = logging.getLogger(__name__)


@router.post("/register_device", response_model=DeviceRegistrationResponse)
async def register_device(
    registration: DeviceRegistration = Depends(body_as(DeviceRegistration)),
    ip: str = Depends(get_client_ip),
    coordinator: RegistryCoordinator = Depends(get_coordinator),
) -> DeviceRegistrationResponse:
    """
    Register a device, or re-register an existing one.

    Re-registration resets registered_at and last_seen but keeps any
    commands already queued for the device.
    """
    try:
        device = coordinator.register_device(registration.device_id or "", ip)
    except InvalidInput as e:
        logger.warning(f"Registration rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return DeviceRegistrationResponse(
        message=f"Device {device.device_id} registered successfully",
        device_id=device.device_id,
    )


@router.post("/update_status", response_model=StatusUpdateResponse)
async def update_status(
    update: StatusUpdate = Depends(body_as(StatusUpdate)),
    ip: str = Depends(get_client_ip),
    coordinator: RegistryCoordinator = Depends(get_coordinator),
) -> StatusUpdateResponse:
    """
    Report device status.

    Accepted even for devices that never registered; the report is
    stored but does not register the device.
    """
    device_id = update.device_id or ""
    fields = StatusFields(
        status=update.status,
        recording=update.recording,
        screen_recording=update.screen_recording,
    )
    try:
        record = coordinator.update_status(device_id, fields, ip)
    except InvalidInput as e:
        logger.warning(f"Status update rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return StatusUpdateResponse(
        device_id=device_id,
        timestamp=record.last_updated,
    )


@router.get("/get_commands/{device_id}", response_model=CommandsResponse)
async def get_commands(
    device_id: str,
    coordinator: RegistryCoordinator = Depends(get_coordinator),
) -> CommandsResponse:
    """
    Device heartbeat and command polling.

    Returns every pending command in the order it was queued and empties
    the queue. Commands are delivered at most once.
    """
    try:
        result = coordinator.poll_commands(device_id)
    except DeviceNotFound as e:
        logger.warning(f"Command poll from unregistered device {device_id}")
        raise HTTPException(status_code=404, detail=str(e))

    return CommandsResponse(
        device_id=result.device_id,
        commands=result.commands,
        count=result.count,
        timestamp=result.timestamp,
    )
