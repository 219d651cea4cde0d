"""
Invoice Service - Business logic layer for invoice operations.

This service handles invoice creation, scoped lookup, administrative
status overrides, soft deletion and the overdue sweep, separate from the
API layer. Every query is confined to the caller's school through the
invoice's student.
"""
import logging
from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from exceptions import ConflictError, NotFoundError, ValidationError
from models import FeeStructure, Invoice, InvoiceItem, InvoiceStatus, Student, derive_status
from schemas.invoice import InvoiceCreate, InvoiceItemCreate
from services.tenant_scope import Caller, load_student, school_predicate
from utils.money import ZERO, format_money, sum_money, to_money
from utils.numbering import generate_invoice_number

logger = logging.getLogger(__name__)

# Statuses that still expect money and can therefore fall overdue.
OPEN_STATUSES = (InvoiceStatus.PENDING, InvoiceStatus.PARTIAL)


class InvoiceService:
     """Service class for invoice-related business logic."""

     def __init__(self, db: AsyncSession):
          self.db = db

     # --- Helper Methods ---

     def _scope_filters(self, caller: Caller) -> list:
          return [school_predicate(Student.school_id, caller)]

     @staticmethod
     def _build_items(invoice: Invoice, items: Sequence[InvoiceItemCreate]) -> List[InvoiceItem]:
          return [
               InvoiceItem(
                    invoice_id=invoice.id,
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=to_money(item.unit_price),
                    amount=to_money(to_money(item.unit_price) * item.quantity),
                    fee_structure_id=item.fee_structure_id,
               )
               for item in items
          ]

     async def _check_fee_structures(self, items: Sequence[InvoiceItemCreate], school_id: int) -> None:
          """Every referenced fee structure must exist in the student's school."""
          requested = {item.fee_structure_id for item in items if item.fee_structure_id is not None}
          if not requested:
               return
          result = await self.db.execute(
               select(FeeStructure.id).where(
                    FeeStructure.id.in_(requested),
                    FeeStructure.school_id == school_id,
               )
          )
          missing = requested - set(result.scalars().all())
          if missing:
               raise ValidationError(
                    f"Fee structure(s) not found for this school: {', '.join(str(i) for i in sorted(missing))}"
               )

     # --- Operations ---

     async def create_invoice(self, data: InvoiceCreate, caller: Caller) -> Invoice:
          """
          Create an invoice and its items in one transaction.

          Raises:
               NotFoundError: student missing or in another school
               ValidationError: no items, unknown fee structure, negative total
               ConflictError: invoice number collision
          """
          if not data.items:
               raise ValidationError("Invoice must contain at least one item")

          student = await load_student(self.db, data.student_id, caller)
          await self._check_fee_structures(data.items, student.school_id)

          subtotal = sum_money(to_money(item.unit_price) * item.quantity for item in data.items)
          discount = to_money(data.discount)
          tax = to_money(data.tax)
          total_amount = to_money(subtotal - discount + tax)
          if total_amount < 0:
               raise ValidationError(
                    f"Discount cannot exceed subtotal plus tax. Maximum discount: {format_money(subtotal + tax)}"
               )

          invoice = Invoice(
               invoice_number=generate_invoice_number(),
               student_id=student.id,
               due_date=data.due_date,
               subtotal=subtotal,
               discount=discount,
               tax=tax,
               total_amount=total_amount,
               paid_amount=ZERO,
               balance_amount=total_amount,
               status=InvoiceStatus.PENDING,
               notes=data.notes,
          )

          try:
               self.db.add(invoice)
               await self.db.flush()  # Assigns invoice.id for the items
               self.db.add_all(self._build_items(invoice, data.items))
               await self.db.flush()
               await self.db.commit()
          except IntegrityError:
               await self.db.rollback()
               logger.warning("Invoice insert conflicted for student %s", data.student_id)
               raise ConflictError("Invoice could not be created because of a conflicting record; retry the request")
          except Exception:
               await self.db.rollback()
               raise

          logger.info(
               "Created invoice %s for student %s: total=%s items=%d by user %s",
               invoice.invoice_number, student.id, format_money(total_amount), len(data.items), caller.user_id,
          )
          return await self.get_invoice(invoice.id, caller)

     async def get_invoice(self, invoice_id: int, caller: Caller) -> Invoice:
          """
          Tenant-scoped lookup with items and payments loaded.
          Always re-reads the row so callers never see stale amounts.
          """
          result = await self.db.execute(
               select(Invoice)
               .join(Invoice.student)
               .where(Invoice.id == invoice_id, *self._scope_filters(caller))
               .execution_options(populate_existing=True)
          )
          invoice = result.scalars().first()
          if invoice is None:
               raise NotFoundError("Invoice not found")
          return invoice

     async def list_invoices(
          self,
          caller: Caller,
          student_id: Optional[int] = None,
          status: Optional[InvoiceStatus] = None,
          overdue_only: bool = False,
          page: int = 1,
          page_size: int = 50,
     ) -> Tuple[List[Invoice], int]:
          """Paginated, newest first. Returns (invoices, total)."""
          filters = self._scope_filters(caller)
          if student_id is not None:
               filters.append(Invoice.student_id == student_id)
          if status is not None:
               filters.append(Invoice.status == status)
          if overdue_only:
               filters.extend([
                    Invoice.status.in_(OPEN_STATUSES + (InvoiceStatus.OVERDUE,)),
                    Invoice.balance_amount > 0,
                    Invoice.due_date < date.today(),
               ])

          total = await self.db.scalar(
               select(func.count(Invoice.id)).join(Invoice.student).where(*filters)
          )
          result = await self.db.execute(
               select(Invoice)
               .join(Invoice.student)
               .where(*filters)
               .order_by(Invoice.created_at.desc(), Invoice.id.desc())
               .offset((page - 1) * page_size)
               .limit(page_size)
          )
          return list(result.scalars().all()), total or 0

     @staticmethod
     def _check_status_override(invoice: Invoice, new_status: InvoiceStatus) -> None:
          """An override may relabel an invoice but never contradict its amounts."""
          derived = derive_status(invoice.paid_amount, invoice.total_amount)
          if new_status in (InvoiceStatus.PENDING, InvoiceStatus.PARTIAL, InvoiceStatus.PAID):
               if new_status != derived:
                    raise ValidationError(
                         f"Cannot set status {new_status.value}: paid {format_money(invoice.paid_amount)} "
                         f"of {format_money(invoice.total_amount)} means {derived.value}"
                    )
          elif new_status == InvoiceStatus.OVERDUE:
               if invoice.balance_amount <= 0:
                    raise ValidationError("Cannot mark a fully paid invoice as OVERDUE")
          elif new_status == InvoiceStatus.CANCELLED:
               if invoice.paid_amount > 0:
                    raise ValidationError("Cannot cancel an invoice that has payments")

     async def update_invoice_status(self, invoice_id: int, new_status: InvoiceStatus, caller: Caller) -> Invoice:
          """
          Administrative status override. Monetary fields are untouched.

          The write only lands if paid_amount is still what was validated,
          so a payment committed in between turns this into a ConflictError.
          """
          try:
               invoice = await self.get_invoice(invoice_id, caller)
               self._check_status_override(invoice, new_status)
               previous = invoice.status
               result = await self.db.execute(
                    update(Invoice)
                    .where(
                         Invoice.id == invoice.id,
                         Invoice.deleted_at.is_(None),
                         Invoice.paid_amount == invoice.paid_amount,
                    )
                    .values(status=new_status)
                    .execution_options(synchronize_session=False)
               )
               if result.rowcount != 1:
                    raise ConflictError("Invoice changed while its status was being updated; reload and retry")
               await self.db.commit()
          except Exception:
               await self.db.rollback()
               raise

          logger.info(
               "Invoice %s status %s -> %s by user %s",
               invoice.invoice_number, previous.value, new_status.value, caller.user_id,
          )
          return await self.get_invoice(invoice_id, caller)

     async def delete_invoice(self, invoice_id: int, caller: Caller) -> None:
          """
          Soft-delete an invoice that has never been paid against.

          Raises:
               NotFoundError: invoice missing or out of scope
               ValidationError: payments exist
          """
          try:
               invoice = await self.get_invoice(invoice_id, caller)
               if invoice.payments:
                    raise ValidationError("Cannot delete invoice with existing payments")
               # paid_amount = 0 keeps a concurrently committed payment from being orphaned
               result = await self.db.execute(
                    update(Invoice)
                    .where(
                         Invoice.id == invoice.id,
                         Invoice.deleted_at.is_(None),
                         Invoice.paid_amount == 0,
                    )
                    .values(deleted_at=func.now())
                    .execution_options(synchronize_session=False)
               )
               if result.rowcount != 1:
                    raise ValidationError("Cannot delete invoice with existing payments")
               await self.db.commit()
          except Exception:
               await self.db.rollback()
               raise

          logger.info("Soft-deleted invoice %s by user %s", invoice.invoice_number, caller.user_id)

     async def mark_overdue_invoices(self, caller: Caller) -> int:
          """
          Mark open invoices in the caller's scope whose due date has passed
          as OVERDUE. Intended for a daily job or an admin trigger.

          Returns:
               Number of invoices marked as overdue
          """
          scoped_students = select(Student.id).where(
               Student.deleted_at.is_(None),
               school_predicate(Student.school_id, caller),
          )
          try:
               result = await self.db.execute(
                    update(Invoice)
                    .where(
                         Invoice.deleted_at.is_(None),
                         Invoice.status.in_(OPEN_STATUSES),
                         Invoice.balance_amount > 0,
                         Invoice.due_date < date.today(),
                         Invoice.student_id.in_(scoped_students),
                    )
                    .values(status=InvoiceStatus.OVERDUE)
                    .execution_options(synchronize_session=False)
               )
               await self.db.commit()
          except Exception:
               await self.db.rollback()
               raise

          count = result.rowcount
          logger.info("Marked %d invoice(s) overdue (requested by user %s)", count, caller.user_id)
          return count
