"""
Pydantic schemas for Invoice API request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import Field, ConfigDict, field_validator

from models.invoice import InvoiceStatus
from .base import CamelModel
from .payment import PaymentResponse


class InvoiceItemCreate(CamelModel):
     """One line of a new invoice."""
     description: str = Field(..., min_length=1, max_length=255)
     quantity: int = Field(default=1, ge=1, description="Defaults to 1")
     unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     fee_structure_id: Optional[int] = Field(None, gt=0, description="Fee structure this line bills")


class InvoiceCreate(CamelModel):
     """Schema for creating a new invoice."""
     student_id: int = Field(..., gt=0, description="Student being billed (must be in your school)")
     due_date: date = Field(..., description="Payment due date")
     items: List[InvoiceItemCreate] = Field(..., min_length=1)
     discount: Decimal = Field(default=Decimal("0.00"), ge=0, max_digits=12, decimal_places=2)
     tax: Decimal = Field(default=Decimal("0.00"), ge=0, max_digits=12, decimal_places=2)
     notes: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "studentId": 1,
                    "dueDate": "2026-02-28",
                    "items": [{"description": "Tuition", "quantity": 1, "unitPrice": "1000.00"}],
                    "discount": "0.00",
                    "tax": "0.00",
                    "notes": "Term 1"
               }
          }
     )

     @field_validator("due_date", mode="before")
     @classmethod
     def _strip_time(cls, value):
          # Clients often send a full ISO timestamp; only the date part is kept.
          if isinstance(value, str) and "T" in value:
               return value.split("T", 1)[0]
          return value


class InvoiceStatusUpdate(CamelModel):
     """Administrative status override."""
     status: InvoiceStatus

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "status": "CANCELLED"
               }
          }
     )


class InvoiceItemResponse(CamelModel):
     id: int
     description: str
     quantity: int
     unit_price: Decimal
     amount: Decimal
     fee_structure_id: Optional[int] = None
     fee_structure_name: Optional[str] = None


class InvoiceResponse(CamelModel):
     """Schema for invoice response (items and payments included)."""
     id: int
     invoice_number: str
     student_id: int
     student_name: Optional[str] = None
     issue_date: datetime
     due_date: date
     subtotal: Decimal
     discount: Decimal
     tax: Decimal
     total_amount: Decimal
     paid_amount: Decimal
     balance_amount: Decimal
     status: InvoiceStatus
     is_overdue: bool = False
     notes: Optional[str] = None
     created_at: datetime
     items: List[InvoiceItemResponse] = []
     payments: List[PaymentResponse] = []


class InvoiceListResponse(CamelModel):
     """Schema for paginated invoice list response."""
     invoices: List[InvoiceResponse]
     total: int
     page: int = 1
     page_size: int = 50


class OverdueSweepResponse(CamelModel):
     updated: int
