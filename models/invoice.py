# models/invoice.py
import enum
from datetime import date
from decimal import Decimal
from sqlalchemy import (
     Column, Integer, String, Date, DateTime, Text, ForeignKey, Enum,
     CheckConstraint, func,
)
from sqlalchemy.orm import relationship
from .base import Base, SoftDeleteMixin
from .types import Money


class InvoiceStatus(str, enum.Enum):
     """Enumeration for invoice payment status."""
     PENDING = "PENDING"
     PARTIAL = "PARTIAL"
     PAID = "PAID"
     OVERDUE = "OVERDUE"
     CANCELLED = "CANCELLED"


def derive_status(paid_amount: Decimal, total_amount: Decimal) -> InvoiceStatus:
     """Status implied by the money alone (OVERDUE/CANCELLED are set explicitly)."""
     if total_amount - paid_amount <= 0:
          return InvoiceStatus.PAID
     if paid_amount > 0:
          return InvoiceStatus.PARTIAL
     return InvoiceStatus.PENDING


class Invoice(SoftDeleteMixin, Base):
     """
     Invoice model - a bill owed by a student, made of line items.

     total_amount = subtotal - discount + tax and
     balance_amount = total_amount - paid_amount hold for every row;
     paid_amount, balance_amount and status change only through
     PaymentService or an explicit status override.
     """
     __tablename__ = "invoices"
     __table_args__ = (
          CheckConstraint("balance_amount >= 0", name="ck_invoices_balance_non_negative"),
          CheckConstraint("paid_amount >= 0", name="ck_invoices_paid_non_negative"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     invoice_number = Column(String(40), unique=True, nullable=False, index=True)

     # Foreign keys
     student_id = Column(
          Integer,
          ForeignKey("students.id", ondelete="RESTRICT"),
          nullable=False,
          index=True
     )

     # Dates
     issue_date = Column(DateTime, server_default=func.now(), nullable=False)
     due_date = Column(Date, nullable=False, index=True)

     # Amounts
     subtotal = Column(Money, nullable=False)
     discount = Column(Money, nullable=False, default=Decimal("0.00"))
     tax = Column(Money, nullable=False, default=Decimal("0.00"))
     total_amount = Column(Money, nullable=False)
     paid_amount = Column(Money, nullable=False, default=Decimal("0.00"))
     balance_amount = Column(Money, nullable=False)

     status = Column(
          Enum(InvoiceStatus, name="invoice_status", create_constraint=True),
          default=InvoiceStatus.PENDING,
          nullable=False,
          index=True
     )
     notes = Column(Text, nullable=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, onupdate=func.now(), nullable=True)

     # Relationships
     student = relationship("Student", back_populates="invoices", lazy="joined")
     items = relationship(
          "InvoiceItem",
          back_populates="invoice",
          lazy="selectin",
          order_by="InvoiceItem.id",
          cascade="all, delete-orphan"
     )
     payments = relationship(
          "Payment",
          back_populates="invoice",
          lazy="selectin",
          order_by="[Payment.payment_date.desc(), Payment.id.desc()]"
     )

     def __repr__(self):
          return f"<Invoice(id={self.id}, number='{self.invoice_number}', total={self.total_amount}, status='{self.status.value}')>"

     @property
     def student_name(self):
          return self.student.full_name if self.student else None

     @property
     def is_overdue(self) -> bool:
          """Past due date with money still owed."""
          return (
               self.status in (InvoiceStatus.PENDING, InvoiceStatus.PARTIAL, InvoiceStatus.OVERDUE)
               and self.balance_amount > 0
               and self.due_date < date.today()
          )


class InvoiceItem(Base):
     """
     One billed line. amount = quantity * unit_price, fixed at creation.
     """
     __tablename__ = "invoice_items"

     id = Column(Integer, primary_key=True, autoincrement=True)
     invoice_id = Column(
          Integer,
          ForeignKey("invoices.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     fee_structure_id = Column(Integer, ForeignKey("fee_structures.id"), nullable=True)

     description = Column(String(255), nullable=False)
     quantity = Column(Integer, nullable=False, default=1)
     unit_price = Column(Money, nullable=False)
     amount = Column(Money, nullable=False)

     # Relationships
     invoice = relationship("Invoice", back_populates="items")
     fee_structure = relationship("FeeStructure", lazy="joined")

     @property
     def fee_structure_name(self):
          return self.fee_structure.name if self.fee_structure else None

     def __repr__(self):
          return f"<InvoiceItem(id={self.id}, description='{self.description}', amount={self.amount})>"
