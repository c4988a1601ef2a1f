"""Linear API errors."""

from __future__ import annotations


class LinearError(RuntimeError):
    """Base class for Linear client failures."""


class LinearAPIError(LinearError):
    """Raised when Linear returns an error response or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> LinearAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(f"Linear GraphQL HTTP {status_code}", status_code=status_code)

    @classmethod
    def graphql_errors(cls, errors: object) -> LinearAPIError:
        """Return an error for GraphQL `errors` payloads."""
        return cls(f"Linear GraphQL errors: {errors}")

    @classmethod
    def mutation_failed(cls, mutation: str) -> LinearAPIError:
        """Return an error for a mutation that reported `success: false`."""
        return cls(f"Linear mutation {mutation} reported success=false")

    @classmethod
    def timeout(cls) -> LinearAPIError:
        """Return an error for a request that timed out."""
        return cls("Linear GraphQL request timed out")

    @classmethod
    def network_error(cls, detail: str) -> LinearAPIError:
        """Return an error for DNS, connection or TLS failures."""
        return cls(f"Linear GraphQL network error: {detail}")


class LinearResponseShapeError(LinearError):
    """Raised when Linear responses are missing expected fields."""

    @classmethod
    def missing(cls, field: str) -> LinearResponseShapeError:
        """Return an error for a missing GraphQL response field."""
        return cls(f"Linear GraphQL response missing expected field: {field}")


class LinearConfigError(LinearError):
    """Raised when Linear client configuration is invalid."""

    @classmethod
    def missing_api_key(cls) -> LinearConfigError:
        """Return an error when no API key is configured."""
        return cls("LINEAR_API_KEY is required for the Linear API")

    @classmethod
    def empty_api_key(cls) -> LinearConfigError:
        """Return an error when the provided API key is empty."""
        return cls("Linear API key must be non-empty")
