"""Feed domain exceptions."""

from sadaksathi.core.domain.exceptions import ConfigurationError, DomainException


class PipelineConfigError(ConfigurationError):
    """Raised when the static pipeline configuration cannot be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load pipeline config {path}: {reason}")


class InvalidSourceConfigError(DomainException):
    """Raised when a source entry in the configuration is invalid."""

    def __init__(self, message: str):
        super().__init__(f"Invalid source configuration: {message}")


class UpstreamStatusError(DomainException):
    """Raised for a non-2xx upstream response."""

    error_code = "UPSTREAM_STATUS"

    def __init__(self, status_code: int, reason_phrase: str = ""):
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        super().__init__(f"HTTP {status_code}: {reason_phrase}".rstrip(": "))
