"""Gates — проверки запросов Gatekeeper системы."""

from .request_validation import RequestValidationGate, ValidationResult

__all__ = [
    "RequestValidationGate",
    "ValidationResult",
]
