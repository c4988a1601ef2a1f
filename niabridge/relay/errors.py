"""Relay-layer exceptions."""

from __future__ import annotations

# Body preview length for error messages
_CONTENT_PREVIEW_LIMIT = 100


class InvalidPayloadError(ValueError):
    """Raised when a webhook body cannot be decoded into an event."""

    @classmethod
    def undecodable(cls, detail: str) -> InvalidPayloadError:
        """Return an error for a body that is not a valid webhook payload."""
        if len(detail) > _CONTENT_PREVIEW_LIMIT:
            detail = detail[:_CONTENT_PREVIEW_LIMIT] + "..."
        return cls(f"Webhook payload could not be decoded: {detail}")


class RelayConfigError(Exception):
    """Raised when relay configuration read from the environment is invalid."""

    @classmethod
    def missing(cls, variable: str) -> RelayConfigError:
        """Return an error for a required variable that is unset or blank."""
        return cls(f"{variable} environment variable is required")

    @classmethod
    def invalid_parameter(
        cls, variable: str, value: str, constraint: str
    ) -> RelayConfigError:
        """Return an error for a variable whose value fails validation.

        Parameters
        ----------
        variable
            Environment variable name.
        value
            The rejected raw value.
        constraint
            Description of the accepted values.

        """
        return cls(f"Invalid {variable} '{value}'. {constraint}")
