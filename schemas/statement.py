"""Fee statement response shapes."""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from models.invoice import InvoiceStatus
from .base import CamelModel


class StatementStudent(CamelModel):
     id: int
     admission_number: str
     name: Optional[str] = None
     email: Optional[str] = None
     class_name: Optional[str] = None


class StatementInvoice(CamelModel):
     invoice_number: str
     issue_date: datetime
     due_date: date
     total_amount: Decimal
     paid_amount: Decimal
     balance: Decimal
     status: InvoiceStatus


class StatementSummary(CamelModel):
     total_due: Decimal
     total_paid: Decimal
     current_balance: Decimal


class FeeStatementResponse(CamelModel):
     student: StatementStudent
     invoices: List[StatementInvoice]
     summary: StatementSummary
