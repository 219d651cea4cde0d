from .tenant_scope import Caller, UNSCOPED, scope_filter, school_predicate, load_student
from .invoice_service import InvoiceService
from .payment_service import PaymentService
from .statement_service import FeeStatementService
from .fee_service import FeeStructureService

__all__ = [
     "Caller",
     "UNSCOPED",
     "scope_filter",
     "school_predicate",
     "load_student",
     "InvoiceService",
     "PaymentService",
     "FeeStatementService",
     "FeeStructureService",
]
