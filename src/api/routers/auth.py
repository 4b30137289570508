import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr, Field, field_validator
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_401_UNAUTHORIZED

from api.dependencies import get_settings, get_user_store
from api.settings import Settings
from storage.base import UserStore
from task_organizer.models import User
from task_organizer.security import create_access_token, hash_password, verify_password

router = APIRouter()
logger = logging.getLogger(__name__)


class RegisterIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return str(v).strip().lower()

    @field_validator("name")
    @classmethod
    def _name_min_length(cls, v: str) -> str:
        v2 = v.strip()
        if len(v2) < 2:
            raise ValueError("name must be at least 2 characters")
        return v2


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return str(v).strip().lower()


def _issue_token(user: User, settings: Settings) -> str:
    return create_access_token(
        user.id,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_in=timedelta(days=settings.jwt_expire_days),
    )


def _public_user(user: User) -> dict:
    return {"id": user.id, "email": user.email, "name": user.name}


@router.post("/register", status_code=201)
async def register(
    payload: RegisterIn,
    user_store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Create an account and return an access token."""
    user = await user_store.create_user(
        email=payload.email,
        name=payload.name,
        password_hash=hash_password(payload.password),
    )
    if user is None:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Email already registered")

    logger.info(f"Registered user {user.id}")
    return {
        "message": "User registered successfully",
        "token": _issue_token(user, settings),
        "user": _public_user(user),
    }


@router.post("/login")
async def login(
    payload: LoginIn,
    user_store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
) -> dict:
    user = await user_store.get_user_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return {
        "message": "Login successful",
        "token": _issue_token(user, settings),
        "user": _public_user(user),
    }
