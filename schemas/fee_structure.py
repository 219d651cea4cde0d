"""
Pydantic schemas for fee structure API.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import Field, ConfigDict

from models.fee_structure import FeeFrequency
from .base import CamelModel


class FeeStructureCreate(CamelModel):
     name: str = Field(..., min_length=1, max_length=255)
     description: Optional[str] = None
     amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
     frequency: FeeFrequency = FeeFrequency.YEARLY
     due_day: Optional[int] = Field(None, ge=1, le=31, description="Day of month when due")
     is_optional: bool = False
     academic_year_id: int = Field(..., gt=0)
     class_id: Optional[int] = Field(None, gt=0, description="Omit for a school-wide fee")
     school_id: Optional[int] = Field(None, gt=0, description="Required for super-admins only")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "name": "Tuition Fee",
                    "amount": "1500.00",
                    "frequency": "YEARLY",
                    "academicYearId": 1,
               }
          }
     )


class FeeStructureUpdate(CamelModel):
     """Only provided fields are changed."""
     name: Optional[str] = Field(None, min_length=1, max_length=255)
     description: Optional[str] = None
     amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     frequency: Optional[FeeFrequency] = None
     due_day: Optional[int] = Field(None, ge=1, le=31)
     is_optional: Optional[bool] = None
     academic_year_id: Optional[int] = Field(None, gt=0)
     class_id: Optional[int] = Field(None, gt=0)


class FeeStructureResponse(CamelModel):
     id: int
     school_id: int
     academic_year_id: int
     academic_year_name: Optional[str] = None
     class_id: Optional[int] = None
     class_name: Optional[str] = None
     name: str
     description: Optional[str] = None
     amount: Decimal
     frequency: FeeFrequency
     due_day: Optional[int] = None
     is_optional: bool
     created_at: datetime


class FeeStructureListResponse(CamelModel):
     fee_structures: List[FeeStructureResponse]
     total: int
     page: int = 1
     page_size: int = 50
