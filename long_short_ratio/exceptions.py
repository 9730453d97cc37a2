"""
Long/Short Ratio Exceptions - Failure taxonomy for exchange adapters.

These exceptions never leave an adapter: the adapter boundary converts
each of them into a record with a non-success status. Only
ConfigurationError reaches callers, when an aggregator is being built.
"""

from datetime import datetime
from typing import Any, Optional


class LongShortError(Exception):
    """Base exception for all long/short ratio errors."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.source_name = source_name
        self.original_error = original_error
        self.context = context or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "source_name": self.source_name,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.source_name:
            parts.append(f"[source={self.source_name}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class CapabilityGapError(LongShortError):
    """The exchange has no concept of the requested metric at all."""


class UnsupportedTimeframeError(LongShortError):
    """The exchange offers the metric, but not for this timeframe."""

    def __init__(
        self,
        timeframe: str,
        source_name: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"Timeframe '{timeframe}' not supported.",
            source_name,
            context=context,
        )
        self.timeframe = timeframe

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["timeframe"] = self.timeframe
        return data


class TransportError(LongShortError):
    """Network failure, timeout or non-success response from the exchange."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, source_name, original_error, context)
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "response_body": self.response_body,
            "request_url": self.request_url,
        })
        return data

    def is_server_error(self) -> bool:
        """Check if error is server-side."""
        return self.status_code is not None and 500 <= self.status_code < 600

    def is_client_error(self) -> bool:
        """Check if error is client-side."""
        return self.status_code is not None and 400 <= self.status_code < 500


class DataShapeError(LongShortError):
    """The exchange answered, but the expected fields are absent or malformed."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        field_name: Optional[str] = None,
        raw_data: Optional[Any] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, source_name, original_error, context)
        self.field_name = field_name
        self.raw_data = raw_data

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "field_name": self.field_name,
            "raw_data": str(self.raw_data)[:500] if self.raw_data is not None else None,
        })
        return data


class ConfigurationError(LongShortError):
    """Invalid configuration (unknown exchange id, bad timeout, ...)."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, None, original_error, context)
        self.config_key = config_key

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["config_key"] = self.config_key
        return data
