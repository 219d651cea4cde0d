# models/payment.py
"""
Payment model - money received against an invoice.

Rows are append-only: created once by PaymentService together with the
invoice balance update, never edited or deleted.
"""
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, CheckConstraint, func
from sqlalchemy.orm import relationship
from .base import Base
from .types import Money


class PaymentMethod(str, enum.Enum):
     CASH = "CASH"
     BANK_TRANSFER = "BANK_TRANSFER"
     CARD = "CARD"
     CHEQUE = "CHEQUE"
     ONLINE = "ONLINE"


class Payment(Base):
     __tablename__ = "payments"
     __table_args__ = (
          CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     payment_number = Column(String(40), unique=True, nullable=False, index=True)
     invoice_id = Column(
          Integer,
          ForeignKey("invoices.id", ondelete="RESTRICT"),  # Payment cannot outlive its invoice
          nullable=False,
          index=True
     )
     amount = Column(Money, nullable=False)
     payment_method = Column(
          Enum(PaymentMethod, name="payment_method", create_constraint=True),
          nullable=False
     )
     reference_number = Column(String(255), nullable=True)
     notes = Column(Text, nullable=True)
     payment_date = Column(DateTime, server_default=func.now(), nullable=False, index=True)
     received_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)

     # Relationships
     invoice = relationship("Invoice", back_populates="payments")

     def __repr__(self):
          return f"<Payment(id={self.id}, number='{self.payment_number}', amount={self.amount})>"
