"""
Application error types.

Services raise these; main.py maps each one to an HTTP status with a
single exception handler so messages stay safe to display.
"""
from fastapi import status


class AppError(Exception):
     """Base class for errors surfaced to API callers."""
     status_code = status.HTTP_400_BAD_REQUEST

     def __init__(self, message: str):
          super().__init__(message)
          self.message = message


class NotFoundError(AppError):
     """Entity is absent or outside the caller's school."""
     status_code = status.HTTP_404_NOT_FOUND


class ValidationError(AppError):
     status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(AppError):
     status_code = status.HTTP_409_CONFLICT


class ForbiddenError(AppError):
     """Role may not use this kind of resource at all."""
     status_code = status.HTTP_403_FORBIDDEN
