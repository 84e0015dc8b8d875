"""
Base service layer patterns for business logic encapsulation.

- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Pattern Comparison:
    - ServiceResult: Use for outcomes the caller must branch on
      (webhook idempotency, batch summaries)
    - Exceptions: Use for failures fatal to a mutation
      (core.exceptions and the per-app subclasses)

Usage:
    from core.services import BaseService, ServiceResult

    class CartService(BaseService):
        @classmethod
        def remove_item(cls, user, item_id) -> ServiceResult[None]:
            with cls.atomic():
                deleted, _ = CartItem.objects.filter(cart__user=user, id=item_id).delete()
            if not deleted:
                return ServiceResult.failure("Cart item not found", "NOT_FOUND")
            return ServiceResult.ok(None)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from typing import Any

    from core.exceptions import BaseApplicationError

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        is_success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures

    Usage:
        result = RefundRequestService.create(...)
        if result:
            refund = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    is_success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @property
    def success(self) -> bool:
        return self.is_success

    @classmethod
    def ok(cls, data: T) -> ServiceResult[T]:
        return cls(is_success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Example:
            return ServiceResult.failure("Invoice not found", "NOT_FOUND")
        """
        return cls(
            is_success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    @classmethod
    def from_exception(cls, exc: Exception, error_code: str | None = None) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their own error_code; anything else uses
        the upper-cased exception class name.
        """
        code = error_code or getattr(exc, "error_code", None) or exc.__class__.__name__.upper()
        message = getattr(exc, "message", None) or str(exc)
        return cls(is_success=False, error=message, error_code=code)

    def to_response(self) -> dict[str, Any]:
        """Convert to a DRF-friendly response body."""
        if self.is_success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response

    def map(self, func: Callable[[T], Any]) -> ServiceResult:
        """Transform the data if successful; failures pass through unchanged."""
        if self.is_success and self.data is not None:
            return ServiceResult.ok(func(self.data))
        return self

    def __bool__(self) -> bool:
        return self.is_success


class BaseService:
    """
    Base class for service layer classes.

    Provides:
    - Logging setup per service
    - Database transaction management
    - Exception-to-result conversion

    Design Notes:
        - Use @classmethod (no instance state)
        - Raise core.exceptions subclasses for failures fatal to a mutation
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Logger named after the service class for easy filtering."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Nested use creates savepoints, so a failure inside one block rolls
        back only that block.
        """
        with transaction.atomic():
            yield

    @classmethod
    def handle_exception(
        cls,
        exc: Exception,
        context: str = "",
        log_level: int = logging.ERROR,
    ) -> ServiceResult:
        """Log an exception and convert it to a failed ServiceResult."""
        message = f"{context}: {exc}" if context else str(exc)
        cls.get_logger().log(log_level, message, exc_info=log_level >= logging.ERROR)
        return ServiceResult.from_exception(exc)

    @classmethod
    def validate_required(cls, **kwargs: Any) -> ServiceResult | None:
        """
        Return a failure result if any keyword value is None or blank.

        Example:
            validation = cls.validate_required(reason=reason)
            if validation is not None:
                return validation
        """
        errors = {}
        for field_name, value in kwargs.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field_name] = ["This field is required."]
        if errors:
            return ServiceResult.failure(
                "Required fields missing",
                error_code="VALIDATION_ERROR",
                errors=errors,
            )
        return None

    @classmethod
    def raise_if_missing(cls, error_class: type[BaseApplicationError], **kwargs: Any) -> None:
        """Raise error_class for the first missing keyword value."""
        validation = cls.validate_required(**kwargs)
        if validation is not None:
            missing = ", ".join(sorted(validation.errors or {}))
            raise error_class(f"Missing required value: {missing}", details=validation.errors)
