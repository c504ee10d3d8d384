"""User routes: listing, login, logout and reset."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from enrollgate.chain import require_admin
from enrollgate.config import env_flag, settings
from enrollgate.exceptions import NotImplementedFeatureError
from enrollgate.rbac import Principal
from enrollgate.storage.base import Store
from enrollgate.users import list_users, login_user

router = APIRouter(prefix="/users", tags=["Users"])


class LoginRequest(BaseModel):
    # Missing or empty credentials fall through to login_user and get a 401.
    username: str = Field(default="", max_length=256)
    password: str = Field(default="", max_length=256)


def get_store(request: Request) -> Store:
    return request.app.state.store


async def user_reset_guard(request: Request) -> Principal | None:
    """ADMIN chain for POST /users/reset unless EG_PROTECT_USER_RESET is off."""
    if env_flag("EG_PROTECT_USER_RESET", settings.protect_user_reset):
        return await require_admin(request)
    return None


@router.get("", summary="List users")
async def get_users(
    principal: Principal = Depends(require_admin),
    store: Store = Depends(get_store),
):
    redact = env_flag("EG_REDACT_USER_PASSWORDS", settings.redact_user_passwords)
    return {"success": True, "data": await list_users(store, redact_passwords=redact)}


@router.post("/login", summary="Exchange username/password for an access token")
async def login(req: LoginRequest, store: Store = Depends(get_store)):
    result = await login_user(store, req.username, req.password)
    return {"success": True, "message": "Login successful", "token": result["token"]}


@router.post("/logout", summary="Not implemented: tokens are stateless")
async def logout():
    raise NotImplementedFeatureError("POST /users/logout has not been implemented yet")


@router.post("/reset", summary="Restore the seed user accounts")
async def reset_users(
    principal: Principal | None = Depends(user_reset_guard),
    store: Store = Depends(get_store),
):
    await store.reset_users()
    return {"success": True, "message": "User database has been reset"}
