"""Base domain exceptions.

All domain errors derive from DomainException. Subclasses pick their HTTP
response details through the http_status_code and error_code class
attributes.
"""

from fastapi import status


class DomainException(Exception):
    """Base exception for all domain errors."""

    http_status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str = "A domain error occurred"):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(DomainException):
    """Raised when static configuration cannot be used."""

    http_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "CONFIGURATION_ERROR"
