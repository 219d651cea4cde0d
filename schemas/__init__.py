from .base import CamelModel, MessageResponse
from .invoice import (
     InvoiceCreate,
     InvoiceItemCreate,
     InvoiceStatusUpdate,
     InvoiceItemResponse,
     InvoiceResponse,
     InvoiceListResponse,
     OverdueSweepResponse,
)
from .payment import PaymentCreate, PaymentResponse, PaymentListResponse
from .statement import FeeStatementResponse, StatementInvoice, StatementStudent, StatementSummary
from .fee_structure import (
     FeeStructureCreate,
     FeeStructureUpdate,
     FeeStructureResponse,
     FeeStructureListResponse,
)

__all__ = [
     "CamelModel",
     "MessageResponse",
     "InvoiceCreate",
     "InvoiceItemCreate",
     "InvoiceStatusUpdate",
     "InvoiceItemResponse",
     "InvoiceResponse",
     "InvoiceListResponse",
     "OverdueSweepResponse",
     "PaymentCreate",
     "PaymentResponse",
     "PaymentListResponse",
     "FeeStatementResponse",
     "StatementInvoice",
     "StatementStudent",
     "StatementSummary",
     "FeeStructureCreate",
     "FeeStructureUpdate",
     "FeeStructureResponse",
     "FeeStructureListResponse",
]
