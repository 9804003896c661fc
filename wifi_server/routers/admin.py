"""
Admin routes - Operator interface for devices and their command queues.

These endpoints provide the administrative API for:
- Listing registered devices with status and pending command counts
- Queueing commands for a device
- Clearing a device's pending commands
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from wifi_server.dependencies import body_as, get_coordinator
from wifi_server.models import (
    ClearCommandsResponse,
    DeviceInfo,
    DeviceListResponse,
    SendCommand,
    SendCommandResponse,
)
from wifi_server.store import DeviceNotFound, InvalidInput, RegistryCoordinator

router = APIRouter(prefix="/admin", tags=["Admin"])
logger = logging.getLogger(__name__)


@router.get("/devices", response_model=DeviceListResponse)
async def list_devices(
    coordinator: RegistryCoordinator = Depends(get_coordinator),
) -> DeviceListResponse:
    """
    List all registered devices.

    Status reports from devices that never registered are not listed.
    The result is a snapshot taken at call time.
    """
    devices = [
        DeviceInfo(
            device_id=d.device_id,
            registered_at=d.registered_at,
            last_seen=d.last_seen,
            status=d.status,
            recording=d.recording,
            screen_recording=d.screen_recording,
            pending_commands=d.pending_commands,
            ip=d.ip,
        )
        for d in coordinator.list_devices()
    ]

    return DeviceListResponse(
        total_devices=len(devices),
        devices=devices,
        timestamp=datetime.now(timezone.utc),
    )


@router.post("/send_command", response_model=SendCommandResponse)
async def send_command(
    request: SendCommand = Depends(body_as(SendCommand)),
    coordinator: RegistryCoordinator = Depends(get_coordinator),
) -> SendCommandResponse:
    """Queue a command for a registered device."""
    device_id = request.device_id or ""
    command = request.command or ""

    try:
        pending = coordinator.send_command(device_id, command)
    except InvalidInput as e:
        logger.warning(f"Command rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except DeviceNotFound as e:
        logger.warning(f"Command for unregistered device {device_id}")
        raise HTTPException(status_code=404, detail=str(e))

    return SendCommandResponse(
        message=f"Command '{command}' sent to device {device_id}",
        device_id=device_id,
        command=command,
        pending_commands=pending,
    )


@router.delete("/clear_commands/{device_id}", response_model=ClearCommandsResponse)
async def clear_commands(
    device_id: str,
    coordinator: RegistryCoordinator = Depends(get_coordinator),
) -> ClearCommandsResponse:
    """Drop every pending command for a device without delivering them."""
    try:
        coordinator.clear_commands(device_id)
    except DeviceNotFound as e:
        logger.warning(f"Clear commands for unregistered device {device_id}")
        raise HTTPException(status_code=404, detail=str(e))

    return ClearCommandsResponse(message=f"Commands cleared for device {device_id}")
