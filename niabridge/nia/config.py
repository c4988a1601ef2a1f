"""Configuration for the Nia query client."""

from __future__ import annotations

import dataclasses
import os

from niabridge.nia.errors import NiaConfigError

# Default configuration values - single source of truth
_DEFAULT_ENDPOINT = "https://apigcp.trynia.ai/v2/query"
_DEFAULT_MODEL = "gpt-4o"
_DEFAULT_SEARCH_MODE = "code"
_DEFAULT_TIMEOUT_S = 30.0


def _required(name: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        raise NiaConfigError.missing(name)
    value = raw.strip()
    if not value:
        raise NiaConfigError.missing(name)
    return value


@dataclasses.dataclass(frozen=True, slots=True)
class NiaQueryConfig:
    """Configuration for the Nia query API client.

    Attributes
    ----------
    api_key
        Bearer token for the Nia API.
    repository
        Repository/resource identifier the analysis is restricted to.
    endpoint
        Query endpoint URL.
    model
        ``model_name`` sent with every request.
    search_mode
        ``search_mode`` sent with every request.
    timeout_s
        Request timeout in seconds.

    """

    api_key: str
    repository: str
    endpoint: str = _DEFAULT_ENDPOINT
    model: str = _DEFAULT_MODEL
    search_mode: str = _DEFAULT_SEARCH_MODE
    timeout_s: float = _DEFAULT_TIMEOUT_S

    @staticmethod
    def _parse_timeout_from_env() -> float:
        raw_timeout = os.environ.get("NIA_TIMEOUT_S")
        if raw_timeout is None:
            return _DEFAULT_TIMEOUT_S

        try:
            timeout_s = float(raw_timeout)
        except ValueError as exc:
            raise NiaConfigError.invalid_timeout(raw_timeout) from exc

        if timeout_s <= 0:
            raise NiaConfigError.invalid_timeout(raw_timeout)

        return timeout_s

    @classmethod
    def from_env(cls) -> NiaQueryConfig:
        """Build configuration from environment variables.

        Reads the following environment variables:

        - ``NIA_API_KEY``: Required API key
        - ``REPO_NAME``: Required repository identifier
        - ``NIA_ENDPOINT``: Optional endpoint override
        - ``NIA_MODEL``: Optional model override
        - ``NIA_SEARCH_MODE``: Optional search mode override
        - ``NIA_TIMEOUT_S``: Optional timeout in seconds (positive number)

        Returns
        -------
        NiaQueryConfig
            Configuration instance with values from the environment.

        Raises
        ------
        NiaConfigError
            If a required variable is missing or a value is invalid.

        """
        return cls(
            api_key=_required("NIA_API_KEY"),
            repository=_required("REPO_NAME"),
            endpoint=os.environ.get("NIA_ENDPOINT", _DEFAULT_ENDPOINT),
            model=os.environ.get("NIA_MODEL", _DEFAULT_MODEL),
            search_mode=os.environ.get("NIA_SEARCH_MODE", _DEFAULT_SEARCH_MODE),
            timeout_s=cls._parse_timeout_from_env(),
        )
