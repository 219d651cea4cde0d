# routers/fees.py
"""
Fee structure API routes.

Only administrators read or manage a school's fee catalogue.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_session
from dependencies import ADMIN_ROLES, require_roles
from schemas import (
     FeeStructureCreate,
     FeeStructureListResponse,
     FeeStructureResponse,
     FeeStructureUpdate,
     MessageResponse,
)
from services import Caller, FeeStructureService

router = APIRouter(prefix="/api/fees", tags=["fees"])


@router.post(
     "",
     response_model=FeeStructureResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a fee structure"
)
async def create_fee_structure(
     body: FeeStructureCreate,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES)),
):
     fee = await FeeStructureService(db).create_fee_structure(body, caller)
     return FeeStructureResponse.model_validate(fee)


@router.get(
     "",
     response_model=FeeStructureListResponse,
     summary="List fee structures"
)
async def list_fee_structures(
     search: Optional[str] = Query(None, description="Match on name"),
     class_id: Optional[int] = Query(None, alias="classId", description="Filter by class"),
     academic_year_id: Optional[int] = Query(None, alias="academicYearId", description="Filter by academic year"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(50, ge=1, le=100, alias="pageSize", description="Items per page"),
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES)),
):
     fees, total = await FeeStructureService(db).list_fee_structures(
          caller,
          search=search,
          class_id=class_id,
          academic_year_id=academic_year_id,
          page=page,
          page_size=page_size,
     )
     return FeeStructureListResponse(
          fee_structures=[FeeStructureResponse.model_validate(fee) for fee in fees],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get(
     "/class/{class_id}/year/{academic_year_id}",
     response_model=List[FeeStructureResponse],
     summary="Get fees for a class in an academic year"
)
async def get_fees_for_class(
     class_id: int,
     academic_year_id: int,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES)),
):
     """
     Fees billed to a class for the year: the class's own fees plus the
     school-wide ones, ordered by name.
     """
     fees = await FeeStructureService(db).get_fees_for_class(class_id, academic_year_id, caller)
     return [FeeStructureResponse.model_validate(fee) for fee in fees]


@router.get(
     "/{fee_id}",
     response_model=FeeStructureResponse,
     summary="Get fee structure by ID"
)
async def get_fee_structure(
     fee_id: int,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES)),
):
     fee = await FeeStructureService(db).get_fee_structure(fee_id, caller)
     return FeeStructureResponse.model_validate(fee)


@router.patch(
     "/{fee_id}",
     response_model=FeeStructureResponse,
     summary="Update fee structure"
)
async def update_fee_structure(
     fee_id: int,
     body: FeeStructureUpdate,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES)),
):
     """Only provided fields are updated. Existing invoice items keep their prices."""
     fee = await FeeStructureService(db).update_fee_structure(fee_id, body, caller)
     return FeeStructureResponse.model_validate(fee)


@router.delete(
     "/{fee_id}",
     response_model=MessageResponse,
     summary="Delete fee structure"
)
async def delete_fee_structure(
     fee_id: int,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES)),
):
     await FeeStructureService(db).delete_fee_structure(fee_id, caller)
     return MessageResponse(message="Fee structure deleted successfully")
