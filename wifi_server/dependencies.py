"""
Request dependencies: per-application stores, request bodies and client address.
"""

from typing import Any, Callable, Dict, Type, TypeVar

from fastapi import Depends, HTTPException, Request
from pydantic import BaseModel, ValidationError

from wifi_server.media import MediaStore
from wifi_server.store import UNKNOWN, RegistryCoordinator

FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_coordinator(request: Request) -> RegistryCoordinator:
    """
    Provide the registry owned by the running application.

    Usage:
        @router.get("/example")
        def example(coordinator: RegistryCoordinator = Depends(get_coordinator)):
            ...
    """
    return request.app.state.coordinator


def get_media_store(request: Request) -> MediaStore:
    """Provide the media file store owned by the running application."""
    return request.app.state.media_store


async def get_body(request: Request) -> Dict[str, Any]:
    """
    Read request fields from a JSON, form-encoded or multipart body.

    A missing or empty body yields an empty dict so that absent required
    fields are reported by the handler rather than by request validation.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_TYPES):
        form = await request.form()
        return dict(form)

    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be an object")
    return body


def body_as(model: Type[ModelT]) -> Callable[..., ModelT]:
    """
    Dependency parsing the request body into ``model``.

    Usage:
        @router.post("/example")
        async def example(payload: Example = Depends(body_as(Example))):
            ...
    """

    async def dependency(body: Dict[str, Any] = Depends(get_body)) -> ModelT:
        try:
            return model.model_validate(body)
        except ValidationError as e:
            detail = [{"loc": err["loc"], "msg": err["msg"]} for err in e.errors()]
            raise HTTPException(status_code=400, detail=detail)

    return dependency


def get_client_ip(request: Request) -> str:
    """Best-effort network address of the calling device."""
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN


def get_server_url(request: Request) -> str:
    """Base URL of this server as seen by the client."""
    return str(request.base_url).rstrip("/")
