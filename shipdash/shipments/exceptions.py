"""
Custom exceptions for the shipments and billing services.
"""

from typing import Dict, Any


class BusinessException(Exception):
    """Base exception for business logic errors."""

    def __init__(self, message: str, code: str = "BUSINESS_ERROR", details: Dict[str, Any] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def as_error(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'message': self.message,
            'details': self.details,
        }


class InvalidTransitionException(BusinessException):
    """Raised when attempting an invalid workflow transition."""

    def __init__(self, current_status: str, attempted_status: str, entity_type: str = "shipment"):
        message = f"Invalid transition for {entity_type}: cannot move from {current_status} to {attempted_status}"
        super().__init__(message, "INVALID_TRANSITION", {
            "current_status": current_status,
            "attempted_status": attempted_status,
            "entity_type": entity_type
        })


class ImmutableShipmentException(BusinessException):
    """Raised when a delivered shipment would be modified."""

    def __init__(self, shipment_id: str):
        super().__init__(
            f"Shipment {shipment_id} has been delivered and can no longer change",
            "SHIPMENT_DELIVERED",
            {"shipment_id": shipment_id}
        )


class ValidationException(BusinessException):
    """Raised when data validation fails."""

    def __init__(self, message: str, field_errors: Dict[str, Any] = None):
        super().__init__(message, "VALIDATION_ERROR", field_errors or {})


class ClientAccessDenied(BusinessException):
    """Raised when a record is written on behalf of a client that does not own it."""

    def __init__(self, record_id: str, client_code: str):
        super().__init__(
            f"{record_id} belongs to another client than {client_code}",
            "CLIENT_MISMATCH",
            {"record_id": record_id, "client": client_code}
        )
