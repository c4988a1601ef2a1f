"""Custom exceptions for Nia query operations."""

from __future__ import annotations

# Body preview length for error messages
_CONTENT_PREVIEW_LIMIT = 100


class NiaQueryError(Exception):
    """Base exception for all Nia query errors.

    ``NiaQueryClient.query`` catches this family at its boundary and turns it
    into a ``None`` result, so callers never see these exceptions.
    """


class NiaAPIError(NiaQueryError):
    """Raised when the Nia API call fails or returns an error status.

    Attributes
    ----------
    status_code
        HTTP status code from the API response, if one was received.

    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise the error with message and optional status code."""
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_client_error(self) -> bool:
        """Return True for 4xx responses, which trigger the simplified retry."""
        return self.status_code is not None and 400 <= self.status_code < 500  # noqa: PLR2004

    @classmethod
    def http_error(cls, status_code: int) -> NiaAPIError:
        """Create error for non-2xx HTTP responses.

        Parameters
        ----------
        status_code
            HTTP status code from the response.

        Returns
        -------
        NiaAPIError
            Error carrying the status code.

        """
        return cls(f"Nia API HTTP error {status_code}", status_code=status_code)

    @classmethod
    def timeout(cls, timeout_s: float) -> NiaAPIError:
        """Create error for a request that exceeded its timeout."""
        return cls(f"Nia API request timed out after {timeout_s:g}s")

    @classmethod
    def network_error(cls, detail: str) -> NiaAPIError:
        """Create error for network failures (DNS, connection, TLS, etc.)."""
        return cls(f"Nia API network error: {detail}")


class NiaResponseShapeError(NiaQueryError):
    """Raised when a 2xx response carries no usable answer."""

    @classmethod
    def missing_answer(cls, keys: list[str]) -> NiaResponseShapeError:
        """Create error when no extractor found a populated answer field.

        Parameters
        ----------
        keys
            Top-level keys present in the response, for diagnostics.

        """
        shown = ", ".join(sorted(keys)) or "<none>"
        return cls(f"Nia response has no populated answer field (keys: {shown})")

    @classmethod
    def invalid_json(cls, content: str) -> NiaResponseShapeError:
        """Create error for a body that is not a JSON object."""
        if len(content) > _CONTENT_PREVIEW_LIMIT:
            preview = content[:_CONTENT_PREVIEW_LIMIT] + "..."
        else:
            preview = content
        return cls(f"Failed to parse JSON from Nia response: {preview}")


class NiaConfigError(NiaQueryError):
    """Raised when Nia client configuration is invalid."""

    @classmethod
    def missing(cls, variable: str) -> NiaConfigError:
        """Create error for a required environment variable that is unset."""
        return cls(f"{variable} environment variable is required")

    @classmethod
    def empty_api_key(cls) -> NiaConfigError:
        """Create error for an empty API key."""
        return cls("Nia API key must be non-empty")

    @classmethod
    def invalid_timeout(cls, value: str) -> NiaConfigError:
        """Create error for a timeout that is not a positive number."""
        return cls(f"Invalid NIA_TIMEOUT_S '{value}'. Must be a positive number")
