# routers/invoices.py
"""
Invoice API routes.

Role-based access:
- Super admin / School admin: create, list, override status, delete
- Student / Parent: read a single invoice
Every lookup is confined to the caller's school (super admin: all schools).
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_session
from dependencies import ADMIN_ROLES, READER_ROLES, require_roles
from models import InvoiceStatus
from schemas import (
     InvoiceCreate,
     InvoiceListResponse,
     InvoiceResponse,
     InvoiceStatusUpdate,
     MessageResponse,
     OverdueSweepResponse,
)
from services import Caller, InvoiceService

router = APIRouter(prefix="/api/payments/invoices", tags=["invoices"])


@router.post(
     "",
     response_model=InvoiceResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a new invoice"
)
async def create_invoice(
     invoice_data: InvoiceCreate,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES))
):
     """
     Create an invoice with its line items for a student.

     - **studentId**: student being billed (must be in your school)
     - **dueDate**: payment due date
     - **items**: at least one `{description, quantity?, unitPrice, feeStructureId?}`
     - **discount** / **tax**: optional, default 0

     Totals are computed server-side; the invoice starts PENDING with the
     full total outstanding.
     """
     invoice = await InvoiceService(db).create_invoice(invoice_data, caller)
     return InvoiceResponse.model_validate(invoice)


@router.get(
     "",
     response_model=InvoiceListResponse,
     summary="List invoices with filters"
)
async def list_invoices(
     student_id: Optional[int] = Query(None, alias="studentId", description="Filter by student"),
     status_filter: Optional[InvoiceStatus] = Query(None, alias="status", description="Filter by status"),
     overdue_only: bool = Query(False, alias="overdueOnly", description="Only unpaid invoices past due"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(50, ge=1, le=100, alias="pageSize", description="Items per page"),
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES))
):
     invoices, total = await InvoiceService(db).list_invoices(
          caller,
          student_id=student_id,
          status=status_filter,
          overdue_only=overdue_only,
          page=page,
          page_size=page_size,
     )
     return InvoiceListResponse(
          invoices=[InvoiceResponse.model_validate(inv) for inv in invoices],
          total=total,
          page=page,
          page_size=page_size
     )


@router.post(
     "/mark-overdue",
     response_model=OverdueSweepResponse,
     summary="Mark past-due invoices as overdue"
)
async def mark_overdue_invoices(
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES))
):
     """
     Set OVERDUE on PENDING/PARTIAL invoices in your school whose due date
     has passed. Normally run by a daily job.
     """
     updated = await InvoiceService(db).mark_overdue_invoices(caller)
     return OverdueSweepResponse(updated=updated)


@router.get(
     "/{invoice_id}",
     response_model=InvoiceResponse,
     summary="Get invoice by ID"
)
async def get_invoice(
     invoice_id: int,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*READER_ROLES))
):
     invoice = await InvoiceService(db).get_invoice(invoice_id, caller)
     return InvoiceResponse.model_validate(invoice)


@router.patch(
     "/{invoice_id}/status",
     response_model=InvoiceResponse,
     summary="Override invoice status"
)
async def update_invoice_status(
     invoice_id: int,
     body: InvoiceStatusUpdate,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES))
):
     """
     Change the status label only; amounts are never touched.

     PENDING / PARTIAL / PAID must match what the amounts imply,
     OVERDUE needs an outstanding balance and CANCELLED needs no payments.
     """
     invoice = await InvoiceService(db).update_invoice_status(invoice_id, body.status, caller)
     return InvoiceResponse.model_validate(invoice)


@router.delete(
     "/{invoice_id}",
     response_model=MessageResponse,
     summary="Delete invoice"
)
async def delete_invoice(
     invoice_id: int,
     db: AsyncSession = Depends(get_session),
     caller: Caller = Depends(require_roles(*ADMIN_ROLES))
):
     """
     Soft-delete an invoice. Invoices with payments cannot be deleted (400).
     """
     await InvoiceService(db).delete_invoice(invoice_id, caller)
     return MessageResponse(message="Invoice deleted successfully")
