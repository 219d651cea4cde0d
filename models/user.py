# models/user.py
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from .base import Base, SoftDeleteMixin


class Role(str, enum.Enum):
     """Roles carried in the access token."""
     SUPER_ADMIN = "SUPER_ADMIN"
     SCHOOL_ADMIN = "SCHOOL_ADMIN"
     TEACHER = "TEACHER"
     STUDENT = "STUDENT"
     PARENT = "PARENT"


class User(SoftDeleteMixin, Base):
     """
     User model - central authentication table.
     school_id is null only for super-admins.
     """
     __tablename__ = "users"

     id = Column(Integer, primary_key=True, autoincrement=True)
     email = Column(String(255), unique=True, nullable=False, index=True)
     first_name = Column(String(100), nullable=False)
     last_name = Column(String(100), nullable=False)
     role = Column(Enum(Role, name="user_role", create_constraint=True), nullable=False)
     school_id = Column(Integer, ForeignKey("schools.id"), nullable=True, index=True)
     is_active = Column(Boolean, default=True, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     student = relationship("Student", back_populates="user", uselist=False)

     @property
     def full_name(self) -> str:
          return f"{self.first_name} {self.last_name}"

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
