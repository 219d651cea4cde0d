from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base, SoftDeleteMixin


class AcademicYear(SoftDeleteMixin, Base):
     """
     AcademicYear model - a school's billing year (e.g. "2026/2027").
     Fee structures are priced per academic year.
     """
     id = Column(Integer, primary_key=True, autoincrement=True)
     school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)
     name = Column(String(50), nullable=False)
     start_date = Column(Date, nullable=True)
     end_date = Column(Date, nullable=True)
     is_current = Column(Boolean, default=False, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<AcademicYear(id={self.id}, name='{self.name}', school_id={self.school_id})>"


class SchoolClass(SoftDeleteMixin, Base):
     """SchoolClass model - a class/grade students are enrolled in."""
     id = Column(Integer, primary_key=True, autoincrement=True)
     school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)
     name = Column(String(100), nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     students = relationship("Student", back_populates="current_class")

     def __repr__(self):
          return f"<SchoolClass(id={self.id}, name='{self.name}', school_id={self.school_id})>"
