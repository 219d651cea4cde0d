"""
Tenant scoping policy.

Every read and write on school-owned data is filtered by the caller's
school. Super-admins are unscoped. A non-super-admin without a school
matches nothing: scoped reads come back empty (or NotFound), never
cross-tenant.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import false, select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from exceptions import NotFoundError
from models import Role, Student

logger = logging.getLogger(__name__)


class _Unscoped:
     def __repr__(self):
          return "UNSCOPED"


UNSCOPED = _Unscoped()


@dataclass(frozen=True)
class Caller:
     """Authenticated identity handed to every service call."""
     user_id: int
     role: Role
     school_id: Optional[int]
     email: Optional[str] = None

     @property
     def is_super_admin(self) -> bool:
          return self.role == Role.SUPER_ADMIN


def scope_filter(caller: Caller) -> Union[int, None, _Unscoped]:
     """
     School id the caller is confined to, or UNSCOPED for super-admins.
     May return None for a misconfigured non-super-admin account.
     """
     if caller.is_super_admin:
          return UNSCOPED
     return caller.school_id


def school_predicate(column, caller: Caller) -> ColumnElement[bool]:
     """SQL condition restricting `column` (a school id column) to the caller's tenant."""
     scope = scope_filter(caller)
     if scope is UNSCOPED:
          return true()
     if scope is None:
          logger.warning("User %s (%s) has no school; scoped query matches nothing", caller.user_id, caller.role.value)
          return false()
     return column == scope


async def load_student(db: AsyncSession, student_id: int, caller: Caller) -> Student:
     """Fetch a student visible to the caller, or raise NotFoundError."""
     result = await db.execute(
          select(Student).where(Student.id == student_id, school_predicate(Student.school_id, caller))
     )
     student = result.scalars().first()
     if student is None:
          raise NotFoundError("Student not found")
     return student
