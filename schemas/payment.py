"""
Pydantic schemas for payment API.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import Field, ConfigDict

from models.payment import PaymentMethod
from .base import CamelModel


class PaymentCreate(CamelModel):
     """Request body for POST /api/payments."""

     invoice_id: int = Field(..., gt=0, description="Invoice the payment settles")
     amount: Decimal = Field(
          ...,
          gt=0,
          max_digits=12,
          decimal_places=2,
          description="Amount received (cannot exceed the invoice balance)",
     )
     payment_method: PaymentMethod
     reference_number: Optional[str] = Field(
          None,
          max_length=255,
          description="External reference (bank slip, cheque number, ...)",
     )
     notes: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "invoiceId": 1,
                    "amount": "400.00",
                    "paymentMethod": "CASH",
                    "referenceNumber": "RCPT-0042",
               }
          }
     )


class PaymentResponse(CamelModel):
     id: int
     payment_number: str
     invoice_id: int
     amount: Decimal
     payment_method: PaymentMethod
     reference_number: Optional[str] = None
     notes: Optional[str] = None
     payment_date: datetime
     received_by_id: int


class PaymentListResponse(CamelModel):
     payments: List[PaymentResponse]
     total: int
     page: int = 1
     page_size: int = 50
