"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the domain apps. Business rules live in
the apps themselves (orders, payments, vouchers, refunds, payouts).

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key
    - SoftDeleteMixin: Soft delete support (is_deleted, deleted_at)
    - SlugMixin: Auto-generated URL slugs
    - OptimisticLockMixin: Version counter for compare-and-set updates

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Managers (import from core.managers):
    - SoftDeleteManager: Filter deleted records by default
    - SoftDeleteQuerySet: QuerySet with soft delete operations

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError, NotFoundError, PermissionDeniedError, ConflictError
    - api_exception_handler: DRF exception handler

Helpers (import from core.helpers):
    - round2: Money rounding (half up, two places)
    - to_minor_units / from_minor_units: Centavo conversion
    - allocate_proportionally: Remainder-safe proportional split
    - generate_code: Random upper-case codes

Note:
    Nothing is re-exported here. Import from the submodules listed above.
"""
