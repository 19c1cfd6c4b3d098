"""Exceptions raised by the ads monitor."""

from typing import Any, Optional


class GoogleAdsClientError(Exception):
    """Error returned by the Google Ads API or its OAuth endpoint."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details

    @property
    def is_server_error(self) -> bool:
        """Whether the error came from a 5xx response."""
        return self.status_code is not None and self.status_code >= 500


class GoogleAdsAuthError(GoogleAdsClientError):
    """Access token could not be obtained from the refresh token."""


def is_retryable_error(error: BaseException) -> bool:
    """Decide whether a failed query may be attempted again.

    Transport failures and 5xx responses are transient. Client errors and
    authentication failures are not.
    """
    if isinstance(error, GoogleAdsAuthError):
        return False
    if isinstance(error, GoogleAdsClientError):
        return error.is_server_error
    return True


class UnknownCheckError(ValueError):
    """Requested check identifier is not registered."""

    def __init__(self, check_ids):
        self.check_ids = list(check_ids)
        super().__init__(f"Unknown check(s): {', '.join(self.check_ids)}")


class MonitorConfigurationError(Exception):
    """Process-wide configuration needed for monitoring is missing."""
