"""
Payment Service - applies payments to invoices.

A payment and the invoice balance it reduces are written in one
transaction. The balance check lives inside the UPDATE itself:

     UPDATE invoices
        SET paid_amount = paid_amount + :amount,
            balance_amount = balance_amount - :amount,
            status = CASE ... END
      WHERE id = :id AND deleted_at IS NULL AND status != 'CANCELLED'
        AND balance_amount >= :amount

so two concurrent payments can never both pass against a stale balance;
the loser affects zero rows and is rejected.
"""
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import case, func, literal, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from exceptions import ConflictError, NotFoundError, ValidationError
from models import Invoice, InvoiceStatus, Payment, Student
from schemas.payment import PaymentCreate
from services.invoice_service import InvoiceService
from services.tenant_scope import Caller, school_predicate
from utils.money import ZERO, format_money, to_money
from utils.numbering import generate_payment_number

logger = logging.getLogger(__name__)


def _exceeds_balance(balance: Decimal) -> ValidationError:
     return ValidationError(f"Payment amount exceeds balance. Maximum: {format_money(balance)}")


class PaymentService:
     """Service class for recording and reading payments."""

     def __init__(self, db: AsyncSession, invoices: Optional[InvoiceService] = None):
          self.db = db
          self.invoices = invoices or InvoiceService(db)

     async def _apply_to_invoice(self, invoice_id: int, amount: Decimal) -> bool:
          """
          Add `amount` to the invoice in a single conditional UPDATE.
          Returns False when the row no longer accepts that amount.

          Every bound value is typed by a Money column, so the arithmetic
          and comparisons run on exact amounts in SQL.
          """
          status_type = Invoice.__table__.c.status.type
          result = await self.db.execute(
               update(Invoice)
               .where(
                    Invoice.id == invoice_id,
                    Invoice.deleted_at.is_(None),
                    Invoice.status != InvoiceStatus.CANCELLED,
                    Invoice.balance_amount >= amount,
               )
               .values(
                    paid_amount=Invoice.paid_amount + amount,
                    balance_amount=Invoice.balance_amount - amount,
                    # amount > 0, so anything short of the full balance leaves it PARTIAL
                    status=case(
                         (Invoice.balance_amount <= amount, literal(InvoiceStatus.PAID, status_type)),
                         else_=literal(InvoiceStatus.PARTIAL, status_type),
                    ),
               )
               .execution_options(synchronize_session=False)
          )
          return result.rowcount == 1

     async def _current_balance(self, invoice_id: int) -> Decimal:
          balance = await self.db.scalar(select(Invoice.balance_amount).where(Invoice.id == invoice_id))
          return balance if balance is not None else ZERO

     async def create_payment(self, data: PaymentCreate, caller: Caller) -> Payment:
          """
          Record a payment against an invoice in the caller's school.

          1. Load the invoice (scoped)
          2. Validate amount > 0 and amount <= balance
          3. Conditionally update paid/balance/status
          4. Insert the payment row, then commit both together

          Raises:
               NotFoundError: invoice missing or out of scope
               ValidationError: non-positive amount, amount above balance,
                    cancelled invoice
          """
          amount = to_money(data.amount)
          if amount <= 0:
               raise ValidationError("Payment amount must be greater than zero")

          try:
               invoice = await self.invoices.get_invoice(data.invoice_id, caller)
               if invoice.status == InvoiceStatus.CANCELLED:
                    raise ValidationError("Cannot record a payment against a cancelled invoice")
               if amount > invoice.balance_amount:
                    raise _exceeds_balance(invoice.balance_amount)

               if not await self._apply_to_invoice(invoice.id, amount):
                    # Another payment got there first; report what is left now.
                    raise _exceeds_balance(await self._current_balance(invoice.id))

               payment = Payment(
                    payment_number=generate_payment_number(),
                    invoice_id=invoice.id,
                    amount=amount,
                    payment_method=data.payment_method,
                    reference_number=data.reference_number,
                    notes=data.notes,
                    received_by_id=caller.user_id,
               )
               self.db.add(payment)
               await self.db.flush()
               await self.db.commit()
          except ValidationError as exc:
               await self.db.rollback()
               logger.warning("Rejected payment of %s on invoice %s: %s", format_money(amount), data.invoice_id, exc.message)
               raise
          except IntegrityError:
               await self.db.rollback()
               logger.warning("Payment insert conflicted on invoice %s", data.invoice_id)
               raise ConflictError("Payment could not be recorded because of a conflicting record; retry the request")
          except Exception:
               await self.db.rollback()
               raise

          await self.db.refresh(payment)
          logger.info(
               "Recorded payment %s of %s (%s) on invoice %s by user %s",
               payment.payment_number, format_money(amount), payment.payment_method.value,
               invoice.invoice_number, caller.user_id,
          )
          return payment

     def _scoped_query(self, caller: Caller):
          return (
               select(Payment)
               .join(Payment.invoice)
               .join(Invoice.student)
               .where(school_predicate(Student.school_id, caller))
          )

     async def get_payment(self, payment_id: int, caller: Caller) -> Payment:
          result = await self.db.execute(self._scoped_query(caller).where(Payment.id == payment_id))
          payment = result.scalars().first()
          if payment is None:
               raise NotFoundError("Payment not found")
          return payment

     async def list_payments(
          self,
          caller: Caller,
          invoice_id: Optional[int] = None,
          date_from: Optional[date] = None,
          date_to: Optional[date] = None,
          page: int = 1,
          page_size: int = 50,
     ) -> Tuple[List[Payment], int]:
          """Paginated, most recent first. date_to is inclusive."""
          filters = [school_predicate(Student.school_id, caller)]
          if invoice_id is not None:
               filters.append(Payment.invoice_id == invoice_id)
          if date_from is not None:
               filters.append(Payment.payment_date >= datetime.combine(date_from, time.min))
          if date_to is not None:
               filters.append(Payment.payment_date < datetime.combine(date_to + timedelta(days=1), time.min))

          total = await self.db.scalar(
               select(func.count(Payment.id))
               .join(Payment.invoice)
               .join(Invoice.student)
               .where(*filters)
          )
          result = await self.db.execute(
               select(Payment)
               .join(Payment.invoice)
               .join(Invoice.student)
               .where(*filters)
               .order_by(Payment.payment_date.desc(), Payment.id.desc())
               .offset((page - 1) * page_size)
               .limit(page_size)
          )
          return list(result.scalars().all()), total or 0
