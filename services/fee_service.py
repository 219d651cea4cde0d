"""
Fee Structure Service - the school's catalogue of chargeable fees.

Every fee is priced for one academic year; a fee without a class applies
to every class in the school.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from exceptions import NotFoundError, ValidationError
from models import AcademicYear, FeeStructure, School, SchoolClass
from schemas.fee_structure import FeeStructureCreate, FeeStructureUpdate
from services.tenant_scope import Caller, school_predicate
from utils.money import to_money

logger = logging.getLogger(__name__)


class FeeStructureService:

     def __init__(self, db: AsyncSession):
          self.db = db

     async def _resolve_school_id(self, data: FeeStructureCreate, caller: Caller) -> int:
          """Admins create in their own school; super-admins must name one."""
          if caller.is_super_admin:
               if data.school_id is None:
                    raise ValidationError("schoolId is required when creating fee structures as super admin")
               school = await self.db.scalar(select(School.id).where(School.id == data.school_id))
               if school is None:
                    raise NotFoundError("School not found")
               return data.school_id
          if caller.school_id is None:
               raise ValidationError("Your account is not attached to a school")
          return caller.school_id

     async def _check_references(self, school_id: int, academic_year_id: Optional[int], class_id: Optional[int]) -> None:
          """Academic year and class must belong to the fee's school."""
          if academic_year_id is not None:
               found = await self.db.scalar(
                    select(AcademicYear.id).where(AcademicYear.id == academic_year_id, AcademicYear.school_id == school_id)
               )
               if found is None:
                    raise ValidationError(f"Academic year {academic_year_id} not found in this school")
          if class_id is not None:
               found = await self.db.scalar(
                    select(SchoolClass.id).where(SchoolClass.id == class_id, SchoolClass.school_id == school_id)
               )
               if found is None:
                    raise ValidationError(f"Class {class_id} not found in this school")

     async def create_fee_structure(self, data: FeeStructureCreate, caller: Caller) -> FeeStructure:
          school_id = await self._resolve_school_id(data, caller)
          await self._check_references(school_id, data.academic_year_id, data.class_id)
          fee = FeeStructure(
               school_id=school_id,
               academic_year_id=data.academic_year_id,
               class_id=data.class_id,
               name=data.name,
               description=data.description,
               amount=to_money(data.amount),
               frequency=data.frequency,
               due_day=data.due_day,
               is_optional=data.is_optional,
          )
          try:
               self.db.add(fee)
               await self.db.flush()
               await self.db.commit()
          except Exception:
               await self.db.rollback()
               raise
          await self.db.refresh(fee)
          logger.info("Created fee structure %s '%s' in school %s", fee.id, fee.name, school_id)
          return fee

     async def list_fee_structures(
          self,
          caller: Caller,
          search: Optional[str] = None,
          class_id: Optional[int] = None,
          academic_year_id: Optional[int] = None,
          page: int = 1,
          page_size: int = 50,
     ) -> Tuple[List[FeeStructure], int]:
          filters = [school_predicate(FeeStructure.school_id, caller)]
          if search:
               filters.append(FeeStructure.name.ilike(f"%{search}%"))
          if class_id is not None:
               filters.append(FeeStructure.class_id == class_id)
          if academic_year_id is not None:
               filters.append(FeeStructure.academic_year_id == academic_year_id)

          total = await self.db.scalar(select(func.count(FeeStructure.id)).where(*filters))
          result = await self.db.execute(
               select(FeeStructure)
               .where(*filters)
               .order_by(FeeStructure.created_at.desc(), FeeStructure.id.desc())
               .offset((page - 1) * page_size)
               .limit(page_size)
          )
          return list(result.scalars().all()), total or 0

     async def get_fees_for_class(self, class_id: int, academic_year_id: int, caller: Caller) -> List[FeeStructure]:
          """Fees a class pays in a year: its own plus the school-wide ones, by name."""
          result = await self.db.execute(
               select(FeeStructure)
               .where(
                    school_predicate(FeeStructure.school_id, caller),
                    FeeStructure.academic_year_id == academic_year_id,
                    or_(FeeStructure.class_id == class_id, FeeStructure.class_id.is_(None)),
               )
               .order_by(FeeStructure.name.asc(), FeeStructure.id.asc())
          )
          return list(result.scalars().all())

     async def get_fee_structure(self, fee_id: int, caller: Caller) -> FeeStructure:
          result = await self.db.execute(
               select(FeeStructure)
               .where(FeeStructure.id == fee_id, school_predicate(FeeStructure.school_id, caller))
               .execution_options(populate_existing=True)
          )
          fee = result.scalars().first()
          if fee is None:
               raise NotFoundError("Fee structure not found")
          return fee

     async def update_fee_structure(self, fee_id: int, data: FeeStructureUpdate, caller: Caller) -> FeeStructure:
          try:
               fee = await self.get_fee_structure(fee_id, caller)
               changes = data.model_dump(exclude_unset=True)
               if "amount" in changes and changes["amount"] is not None:
                    changes["amount"] = to_money(changes["amount"])
               if "academic_year_id" in changes and changes["academic_year_id"] is None:
                    raise ValidationError("academicYearId cannot be cleared")
               await self._check_references(fee.school_id, changes.get("academic_year_id"), changes.get("class_id"))
               for field, value in changes.items():
                    setattr(fee, field, value)
               await self.db.flush()
               await self.db.commit()
          except Exception:
               await self.db.rollback()
               raise
          await self.db.refresh(fee)
          return fee

     async def delete_fee_structure(self, fee_id: int, caller: Caller) -> None:
          """Soft delete; invoice items keep their reference."""
          try:
               fee = await self.get_fee_structure(fee_id, caller)
               fee.deleted_at = func.now()
               await self.db.flush()
               await self.db.commit()
          except Exception:
               await self.db.rollback()
               raise
          logger.info("Soft-deleted fee structure %s", fee_id)
