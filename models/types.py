# models/types.py
"""
Column types shared by the finance models.
"""
from decimal import Decimal

from sqlalchemy import BigInteger, Numeric
from sqlalchemy.types import TypeDecorator

from utils.money import to_money


class Money(TypeDecorator):
     """
     Exact currency amount with two decimal places.

     NUMERIC(12, 2) on server databases. SQLite has no exact decimal
     storage (NUMERIC columns hold REAL), so there the value is kept as
     an integer number of cents; comparisons and additions done inside
     SQL stay exact on both.
     """
     impl = Numeric
     cache_ok = True

     def load_dialect_impl(self, dialect):
          if dialect.name == "sqlite":
               return dialect.type_descriptor(BigInteger())
          return dialect.type_descriptor(Numeric(12, 2))

     def process_bind_param(self, value, dialect):
          if value is None:
               return None
          value = to_money(value)
          if dialect.name == "sqlite":
               return int(value.scaleb(2))
          return value

     def process_result_value(self, value, dialect):
          if value is None:
               return None
          if dialect.name == "sqlite":
               return to_money(Decimal(value).scaleb(-2))
          return to_money(value)
