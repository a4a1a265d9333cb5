from typing import Any, Optional


class AppException(Exception):
    """Base exception for all application-specific errors."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[Any] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class NotFoundException(AppException):
    """Exception raised when a resource is not found."""

    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
            details=details,
        )


class ValidationException(AppException):
    """Exception raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: Optional[Any] = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedException(AppException):
    """Exception raised when authentication fails."""

    def __init__(self, message: str = "Unauthorized access", details: Optional[Any] = None):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
            details=details,
        )


class ForbiddenException(AppException):
    """Exception raised when the caller may not act on a resource."""

    def __init__(self, message: str = "Access denied", details: Optional[Any] = None):
        super().__init__(
            code="FORBIDDEN",
            message=message,
            status_code=403,
            details=details,
        )


class DuplicateNameException(AppException):
    """Exception raised when a plan name is already taken."""

    def __init__(self, message: str = "A plan with this name already exists", details: Optional[Any] = None):
        super().__init__(
            code="DUPLICATE_NAME",
            message=message,
            status_code=400,
            details=details,
        )


class PlanInactiveException(AppException):
    """Exception raised when subscribing to a deactivated plan."""

    def __init__(self, message: str = "Plan is not active", details: Optional[Any] = None):
        super().__init__(
            code="PLAN_INACTIVE",
            message=message,
            status_code=400,
            details=details,
        )


class InvalidTransitionException(AppException):
    """Exception raised when a subscription state change is not allowed."""

    def __init__(
        self,
        message: str = "Invalid status transition",
        details: Optional[Any] = None,
        status_code: int = 409,
    ):
        super().__init__(
            code="INVALID_TRANSITION",
            message=message,
            status_code=status_code,
            details=details,
        )


class EntitlementRequiredException(AppException):
    """Exception raised when an action requires an active subscription."""

    def __init__(
        self,
        message: str = "An active subscription is required to create nutrition plans",
        details: Optional[Any] = None,
    ):
        super().__init__(
            code="ENTITLEMENT_REQUIRED",
            message=message,
            status_code=403,
            details=details,
        )


class QuotaExceededException(AppException):
    """Exception raised when the active plan's quota is used up."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            code="QUOTA_EXCEEDED",
            message=message,
            status_code=403,
            details=details,
        )


class ConflictException(AppException):
    """Exception raised when a write loses against a concurrent change."""

    def __init__(self, message: str = "Resource was modified concurrently, retry the request", details: Optional[Any] = None):
        super().__init__(
            code="CONFLICT",
            message=message,
            status_code=409,
            details=details,
        )


class DuplicatePlanDateException(AppException):
    """Exception raised when a user already has a nutrition plan for a date."""

    def __init__(self, message: str = "A nutrition plan already exists for this date", details: Optional[Any] = None):
        super().__init__(
            code="DUPLICATE_PLAN_DATE",
            message=message,
            status_code=409,
            details=details,
        )


class EmailAlreadyRegisteredException(AppException):
    def __init__(self, message: str = "Email already registered", details: Optional[Any] = None):
        super().__init__(
            code="EMAIL_ALREADY_REGISTERED",
            message=message,
            status_code=409,
            details=details,
        )

