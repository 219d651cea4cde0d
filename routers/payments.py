# routers/payments.py
"""
Payment API routes.

POST /api/payments records a payment against an invoice and updates the
invoice balance in the same transaction. Also serves payment lookups and
the per-student fee statement.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_session
from dependencies import ADMIN_ROLES, READER_ROLES, require_roles
from schemas import FeeStatementResponse, PaymentCreate, PaymentListResponse, PaymentResponse
from services import Caller, FeeStatementService, PaymentService

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post(
     "",
     response_model=PaymentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Record a payment"
)
async def create_payment(
     body: PaymentCreate,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES)),
):
     """
     Record a payment against an invoice.

     1. Validates the invoice exists in your school (404 otherwise).
     2. Rejects amounts above the outstanding balance (400, with the maximum).
     3. Updates paid amount, balance and status and stores the payment
        atomically.
     """
     payment = await PaymentService(db).create_payment(body, caller)
     return PaymentResponse.model_validate(payment)


@router.get(
     "",
     response_model=PaymentListResponse,
     summary="List payments"
)
async def list_payments(
     invoice_id: Optional[int] = Query(None, alias="invoiceId", description="Filter by invoice"),
     date_from: Optional[date] = Query(None, alias="from", description="Paid on or after"),
     date_to: Optional[date] = Query(None, alias="to", description="Paid on or before"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(50, ge=1, le=100, alias="pageSize", description="Items per page"),
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES)),
):
     payments, total = await PaymentService(db).list_payments(
          caller,
          invoice_id=invoice_id,
          date_from=date_from,
          date_to=date_to,
          page=page,
          page_size=page_size,
     )
     return PaymentListResponse(
          payments=[PaymentResponse.model_validate(p) for p in payments],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get(
     "/students/{student_id}/statement",
     response_model=FeeStatementResponse,
     summary="Get student fee statement"
)
async def get_student_fee_statement(
     student_id: int,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*READER_ROLES)),
):
     """
     Totals due, paid and outstanding for a student, with one line per
     invoice.
     """
     return await FeeStatementService(db).get_student_fee_statement(student_id, caller)


@router.get(
     "/{payment_id}",
     response_model=PaymentResponse,
     summary="Get payment by ID"
)
async def get_payment(
     payment_id: int,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*READER_ROLES)),
):
     payment = await PaymentService(db).get_payment(payment_id, caller)
     return PaymentResponse.model_validate(payment)
