"""
Fee Statement Service - read-only rollup of a student's invoices.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Invoice
from services.tenant_scope import Caller, load_student
from utils.money import sum_money, to_money


class FeeStatementService:
     """Builds the per-student fee statement. Never writes."""

     def __init__(self, db: AsyncSession):
          self.db = db

     async def get_student_fee_statement(self, student_id: int, caller: Caller) -> dict:
          """
          Summarise every live invoice of a student in the caller's school.

          Returns:
               Dictionary with student details, per-invoice breakdown and
               totals (total_due, total_paid, current_balance)

          Raises:
               NotFoundError: student missing or in another school
          """
          student = await load_student(self.db, student_id, caller)

          result = await self.db.execute(
               select(Invoice)
               .where(Invoice.student_id == student.id)
               .order_by(Invoice.created_at.desc(), Invoice.id.desc())
          )
          invoices = result.scalars().all()

          total_due = sum_money(inv.total_amount for inv in invoices)
          total_paid = sum_money(inv.paid_amount for inv in invoices)

          return {
               "student": {
                    "id": student.id,
                    "admission_number": student.admission_number,
                    "name": student.full_name,
                    "email": student.user.email if student.user else None,
                    "class_name": student.class_name,
               },
               "invoices": [
                    {
                         "invoice_number": inv.invoice_number,
                         "issue_date": inv.issue_date,
                         "due_date": inv.due_date,
                         "total_amount": inv.total_amount,
                         "paid_amount": inv.paid_amount,
                         "balance": inv.balance_amount,
                         "status": inv.status,
                    }
                    for inv in invoices
               ],
               "summary": {
                    "total_due": total_due,
                    "total_paid": total_paid,
                    "current_balance": to_money(total_due - total_paid),
               },
          }
