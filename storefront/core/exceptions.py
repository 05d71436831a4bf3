"""Custom exception classes for the application"""

from typing import Optional, Dict, Any


class BaseAPIException(Exception):
    """Base exception for all API errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# Authentication Errors
class AuthenticationError(BaseAPIException):
    """Base authentication error"""
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password, deliberately indistinguishable"""
    def __init__(self):
        super().__init__("Invalid email or password")


class InvalidOrExpiredTokenError(AuthenticationError):
    """Bad signature, wrong key, wrong kind or expired JWT"""
    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


# Authorization Errors
class AuthorizationError(BaseAPIException):
    """Insufficient permissions"""
    def __init__(self, message: str = "You do not have permission to access this resource"):
        super().__init__(message, status_code=403)


class AccountBannedError(AuthorizationError):
    """Account has been banned by an administrator"""
    def __init__(self):
        super().__init__("This account has been banned")


class CSRFValidationError(AuthorizationError):
    """Cross-site state-changing request"""
    def __init__(self, reason: str):
        super().__init__(f"CSRF validation failed: {reason}")


# Resource Errors
class ResourceNotFoundError(BaseAPIException):
    """Resource not found"""
    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", status_code=404)


class ConflictError(BaseAPIException):
    """Resource state conflicts with the request (duplicate email)"""
    def __init__(self, message: str):
        super().__init__(message, status_code=409)


# Validation Errors
class ValidationError(BaseAPIException):
    """Validation error"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class OAuthError(ValidationError):
    """OAuth provider exchange or identity failure"""
    def __init__(self, message: str):
        super().__init__(message)
