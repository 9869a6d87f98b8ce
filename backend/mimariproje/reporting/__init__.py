"""Toasts, error classification and error telemetry."""

from .boundary import ErrorBoundary
from .errors import ErrorHandler, ErrorInfo, ErrorType, classify_api_response, classify_error
from .reporter import ERROR_LOG_KEY, ErrorReporter
from .toasts import Toast, ToastAction, ToastManager, ToastType

__all__ = [
    "ERROR_LOG_KEY",
    "ErrorBoundary",
    "ErrorHandler",
    "ErrorInfo",
    "ErrorReporter",
    "ErrorType",
    "Toast",
    "ToastAction",
    "ToastManager",
    "ToastType",
    "classify_api_response",
    "classify_error",
]
