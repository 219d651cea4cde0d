import enum
from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from .base import Base, SoftDeleteMixin
from .types import Money


class FeeFrequency(str, enum.Enum):
     MONTHLY = "MONTHLY"
     QUARTERLY = "QUARTERLY"
     YEARLY = "YEARLY"
     ONE_TIME = "ONE_TIME"


class FeeStructure(SoftDeleteMixin, Base):
     """
     FeeStructure model - a school's catalogue entry for a chargeable fee.
     Priced per academic year, either for one class or (class_id NULL)
     for the whole school. Invoice items may point back at the fee they
     were billed from.
     """
     __tablename__ = "fee_structures"

     id = Column(Integer, primary_key=True, autoincrement=True)
     school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)
     academic_year_id = Column(Integer, ForeignKey("academic_years.id"), nullable=False, index=True)
     class_id = Column(Integer, ForeignKey("school_classes.id"), nullable=True, index=True)  # NULL = school-wide

     name = Column(String(255), nullable=False)
     description = Column(Text, nullable=True)
     amount = Column(Money, nullable=False)
     frequency = Column(
          Enum(FeeFrequency, name="fee_frequency", create_constraint=True),
          default=FeeFrequency.YEARLY,
          nullable=False,
     )
     due_day = Column(Integer, nullable=True)  # Day of month when due
     is_optional = Column(Boolean, default=False, nullable=False)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, onupdate=func.now(), nullable=True)

     # Relationships
     school = relationship("School", back_populates="fee_structures")
     academic_year = relationship("AcademicYear", lazy="joined")
     school_class = relationship("SchoolClass", lazy="joined")

     @property
     def academic_year_name(self):
          return self.academic_year.name if self.academic_year else None

     @property
     def class_name(self):
          return self.school_class.name if self.school_class else None

     def __repr__(self):
          return f"<FeeStructure(id={self.id}, name='{self.name}', amount={self.amount})>"
