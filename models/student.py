from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base, SoftDeleteMixin


class Student(SoftDeleteMixin, Base):
     """
     Student model - only the columns the finance module reads.
     The student record carries the tenant (school_id) for its invoices.
     """
     __tablename__ = "students"

     id = Column(Integer, primary_key=True, autoincrement=True)
     school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)
     user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
     admission_number = Column(String(50), nullable=False)
     current_class_id = Column(Integer, ForeignKey("school_classes.id"), nullable=True, index=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     school = relationship("School", back_populates="students")
     user = relationship("User", back_populates="student", lazy="joined")
     current_class = relationship("SchoolClass", back_populates="students", lazy="joined")
     invoices = relationship("Invoice", back_populates="student")

     @property
     def full_name(self):
          return self.user.full_name if self.user else None

     @property
     def class_name(self):
          return self.current_class.name if self.current_class else None

     def __repr__(self):
          return f"<Student(id={self.id}, admission_number='{self.admission_number}', school_id={self.school_id})>"
