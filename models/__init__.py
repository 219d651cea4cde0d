# models/__init__.py
from .base import Base, SoftDeleteMixin
from .types import Money
from .school import School
from .user import User, Role
from .academics import AcademicYear, SchoolClass
from .student import Student
from .fee_structure import FeeStructure, FeeFrequency
from .invoice import Invoice, InvoiceItem, InvoiceStatus, derive_status
from .payment import Payment, PaymentMethod

__all__ = [
     "Base",
     "SoftDeleteMixin",
     "Money",
     "School",
     "User",
     "Role",
     "AcademicYear",
     "SchoolClass",
     "Student",
     "FeeStructure",
     "FeeFrequency",
     "Invoice",
     "InvoiceItem",
     "InvoiceStatus",
     "derive_status",
     "Payment",
     "PaymentMethod",
]
