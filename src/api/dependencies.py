import logging
from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException, Request
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_503_SERVICE_UNAVAILABLE

from api.backend import BackendAPI
from api.settings import Settings
from api.state import Services
from storage.base import TaskStore, UserStore
from task_organizer.models import User
from task_organizer.security import decode_access_token

logger = logging.getLogger(__name__)


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Service is starting up")
    return services


def get_settings(services: Services = Depends(get_services)) -> Settings:
    return services.settings


def get_backend(services: Services = Depends(get_services)) -> BackendAPI:
    return services.backend


def get_task_store(services: Services = Depends(get_services)) -> TaskStore:
    return services.task_store


def get_user_store(services: Services = Depends(get_services)) -> UserStore:
    return services.user_store


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
    user_store: UserStore = Depends(get_user_store),
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Authentication required")
    token = authorization.split(" ", 1)[1]
    try:
        payload = decode_access_token(token, settings.jwt_secret, settings.jwt_algorithm)
        user_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user = await user_store.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="User not found or has been deleted")
    return user
