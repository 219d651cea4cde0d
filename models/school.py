from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from .base import Base, SoftDeleteMixin


class School(SoftDeleteMixin, Base):
     """
     School model - the tenant. Every student, fee structure and (through
     the student) every invoice belongs to exactly one school.
     """
     __tablename__ = "schools"

     id = Column(Integer, primary_key=True, autoincrement=True)
     name = Column(String(255), nullable=False)
     code = Column(String(50), unique=True, nullable=False)
     is_active = Column(Boolean, default=True, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     students = relationship("Student", back_populates="school")
     fee_structures = relationship("FeeStructure", back_populates="school")

     def __repr__(self):
          return f"<School(id={self.id}, code='{self.code}')>"
