from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from scolarite.auth.schemas import CurrentUser
from scolarite.core.config import settings
from scolarite.db.store import USERS, RecordStore, get_store


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login-oauth")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    store: RecordStore = Depends(get_store),
) -> CurrentUser:
    """Resolve the authenticated user from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise credentials_exception

    user_id = payload.get("user_id") or payload.get("sub")
    if not user_id:
        raise credentials_exception

    user = await store.get_by_id(USERS, user_id)
    if not user or not user.get("active", True):
        raise credentials_exception

    return CurrentUser(
        id=user["id"],
        name=f"{user.get('first_names', '')} {user.get('last_name', '')}".strip(),
        role=user["role"],
        email=user.get("email"),
    )
