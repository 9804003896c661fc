"""
Routers Package
"""

from wifi_server.routers.admin import router as admin_router
from wifi_server.routers.devices import router as devices_router
from wifi_server.routers.media import router as media_router

__all__ = [
    "admin_router",
    "devices_router",
    "media_router",
]
