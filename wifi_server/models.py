"""
Mobile WiFi Server
Pydantic request and response models
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# Device Models
class DeviceRegistration(BaseModel):
    # Optional so a missing id is reported as 400 rather than 422
    device_id: Optional[str] = None


class DeviceRegistrationResponse(BaseModel):
    status: str = "success"
    message: str
    device_id: str


class StatusUpdate(BaseModel):
    device_id: Optional[str] = None
    status: str = "idle"
    recording: bool = False
    screen_recording: bool = False


class StatusUpdateResponse(BaseModel):
    status: str = "updated"
    device_id: str
    timestamp: datetime


class CommandsResponse(BaseModel):
    device_id: str
    commands: List[str] = Field(default_factory=list)
    count: int
    timestamp: datetime


# ============================================================
# Admin API Models
# ============================================================


class SendCommand(BaseModel):
    device_id: Optional[str] = None
    command: Optional[str] = None


class SendCommandResponse(BaseModel):
    status: str = "success"
    message: str
    device_id: str
    command: str
    pending_commands: int


class ClearCommandsResponse(BaseModel):
    status: str = "success"
    message: str


class DeviceInfo(BaseModel):
    """Admin view of a registered device."""

    device_id: str
    registered_at: datetime
    last_seen: datetime
    status: str = "unknown"
    recording: bool = False
    screen_recording: bool = False
    pending_commands: int = 0
    ip: str = "unknown"


class DeviceListResponse(BaseModel):
    status: str = "success"
    total_devices: int
    devices: List[DeviceInfo] = Field(default_factory=list)
    timestamp: datetime


# ============================================================
# Media Models
# ============================================================


class UploadResponse(BaseModel):
    status: str = "success"
    message: str
    filename: str
    device_id: str
    size_kb: Optional[str] = None
    size_mb: Optional[str] = None
    url: Optional[str] = None
    command_id: Optional[str] = None


class PhotoInfo(BaseModel):
    filename: str
    device_id: str
    url: str
    download_url: str
    size: int
    size_formatted: str
    created: datetime
    modified: datetime


class PhotoListResponse(BaseModel):
    success: bool = True
    photos: List[PhotoInfo] = Field(default_factory=list)
    count: int
    server_url: str
    timestamp: datetime


class PhotoDetailResponse(BaseModel):
    success: bool = True
    filename: str
    url: str
    size: int
    created: datetime
    modified: datetime


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
    deleted: Optional[int] = None


# Service Models
class ServiceInfo(BaseModel):
    status: str = "online"
    message: str
    server_url: str
    endpoints: Dict[str, str]


class PingResponse(BaseModel):
    status: str = "pong"
    timestamp: datetime
