"""Static account lookup: staff accounts live in the users collection."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import status

from scolarite.auth.schemas import LoginRequest, LoginResponse, UserInfo
from scolarite.auth.security import create_access_token, hash_password, verify_password
from scolarite.core.config import settings
from scolarite.core.enums import HistoryType, UserRole
from scolarite.core.exceptions import Conflict, ServiceError
from scolarite.db.store import USERS, RecordStore
from scolarite.api.v1.history.service import log_history

logger = logging.getLogger(__name__)


def _display_name(user: Dict[str, Any]) -> str:
    return f"{user.get('first_names', '')} {user.get('last_name', '')}".strip()


async def find_user_by_email(store: RecordStore, email: str) -> Optional[Dict[str, Any]]:
    email = email.strip().lower()
    for user in await store.get_all(USERS):
        if (user.get("email") or "").lower() == email:
            return user
    return None


async def seed_default_admin(store: RecordStore) -> bool:
    """Create the default Admin account when no user exists. Returns True when created."""
    if await store.get_all(USERS):
        return False
    await store.create(
        USERS,
        {
            "last_name": "DIREC",
            "first_names": "M.",
            "email": settings.default_admin_email.lower(),
            "role": UserRole.ADMIN.value,
            "active": True,
            "password_hash": hash_password(settings.default_admin_password),
        },
    )
    await store.commit()
    logger.info("Seeded default admin account %s", settings.default_admin_email)
    return True


async def create_user(
    store: RecordStore,
    *,
    email: str,
    password: str,
    last_name: str,
    first_names: str = "",
    role: UserRole = UserRole.SECRETAIRE,
) -> Dict[str, Any]:
    if await find_user_by_email(store, email):
        raise Conflict("A user with this email already exists")
    user = await store.create(
        USERS,
        {
            "last_name": last_name,
            "first_names": first_names,
            "email": email.strip().lower(),
            "role": role.value,
            "active": True,
            "password_hash": hash_password(password),
        },
    )
    await store.commit()
    return user


async def login_user(store: RecordStore, payload: LoginRequest) -> LoginResponse:
    user = await find_user_by_email(store, payload.email)
    if not user or not verify_password(payload.password, user.get("password_hash") or ""):
        raise ServiceError("Invalid email or password", status.HTTP_401_UNAUTHORIZED)
    if not user.get("active", True):
        raise ServiceError("User is inactive", status.HTTP_403_FORBIDDEN)

    issued_at = datetime.now(timezone.utc)
    access_token = create_access_token(
        subject={
            "sub": user["id"],
            "user_id": user["id"],
            "role": user["role"],
            "iat": int(issued_at.timestamp()),
        }
    )
    name = _display_name(user)
    await log_history(
        store,
        HistoryType.CONNEXION,
        target="Utilisateur",
        target_id=user["id"],
        description=f"Connexion de {name}",
        user=name,
    )
    await store.commit()
    return LoginResponse(
        access_token=access_token,
        user=UserInfo(id=user["id"], name=name, email=user["email"], role=user["role"]),
        issued_at=issued_at,
    )
