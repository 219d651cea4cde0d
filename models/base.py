# models/base.py
import re

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
     """
     Base class for all SQLAlchemy models.
     Provides common configuration and mixins.
     """

     @declared_attr.directive
     def __tablename__(cls) -> str:
          """
          Automatically generate table name from class name.
          Example: FeeStructure -> fee_structures
          """
          name = re.sub(r'(?<!^)(?=[A-Z])', '_', cls.__name__).lower()
          # Pluralize (simple version)
          if name.endswith('y'):
               return name[:-1] + 'ies'
          elif name.endswith('s'):
               return name + 'es'
          return name + 's'


class SoftDeleteMixin:
     """
     Rows are retired by stamping deleted_at instead of being removed.
     database._exclude_soft_deleted hides them from every ORM SELECT.
     """
     deleted_at = Column(DateTime, nullable=True, index=True)

     @property
     def is_deleted(self) -> bool:
          return self.deleted_at is not None
