"""Shared request dependencies: caller identity and the workout engine."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose.exceptions import ExpiredSignatureError, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import decode_token
from app.db.session import get_db
from app.services.catalog import SqlCatalog
from app.services.engine import WorkoutEngine
from app.services.history import HistoryService

# Tokens are issued by the external identity provider; we only verify them
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    unauth = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or not credentials.credentials:
        raise unauth
    try:
        payload = decode_token(credentials.credentials)
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except JWTError:
        raise unauth
    sub = payload.get("sub")
    if not sub:
        raise unauth
    return str(sub)


def get_engine(db: AsyncSession = Depends(get_db)) -> WorkoutEngine:
    return WorkoutEngine(db, SqlCatalog(db))


def get_history(db: AsyncSession = Depends(get_db)) -> HistoryService:
    return HistoryService(db)
