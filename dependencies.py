# dependencies.py
"""
Shared FastAPI dependencies: bearer-token authentication and role gates.

Tokens are HS256 JWTs carrying the user id in `sub`. The user row is
re-read on every request so deactivated or deleted accounts lose access
immediately and the role/school used for scoping is always current.
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_session
from exceptions import ForbiddenError
from models import Role, User
from services.tenant_scope import Caller

# Load .env
load_dotenv()
SECRET_KEY = os.getenv("JWT_SECRET")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

ADMIN_ROLES = (Role.SUPER_ADMIN, Role.SCHOOL_ADMIN)
READER_ROLES = ADMIN_ROLES + (Role.STUDENT, Role.PARENT)


def create_access_token(user: User, expires_minutes: Optional[int] = None) -> str:
     """Sign a token for `user`. Issuing tokens (login) lives outside this service."""
     expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or ACCESS_TOKEN_EXPIRE_MINUTES)
     payload = {
          "sub": str(user.id),
          "role": user.role.value,
          "school_id": user.school_id,
          "exp": expire,
     }
     return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
     token = auth.split(" ", 1)[1]
     try:
          return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
     except JWTError:
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


async def get_current_user(
     token: dict = Depends(verify_token),
     db: AsyncSession = Depends(get_session),
) -> Caller:
     """Resolve the token to a live user and build the caller context."""
     try:
          user_id = int(token.get("sub"))
     except (TypeError, ValueError):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

     user = await db.scalar(select(User).where(User.id == user_id))
     if user is None or not user.is_active:
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")

     return Caller(user_id=user.id, role=user.role, school_id=user.school_id, email=user.email)


def require_roles(*roles: Role):
     """
     Dependency factory gating a route to the given roles.

     Usage:
          caller: Caller = Depends(require_roles(Role.SUPER_ADMIN, Role.SCHOOL_ADMIN))
     """
     allowed = frozenset(roles)

     async def _dependency(caller: Caller = Depends(get_current_user)) -> Caller:
          if caller.role not in allowed:
               raise ForbiddenError("You do not have permission to perform this action")
          return caller

     return _dependency
