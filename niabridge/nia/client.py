"""Async client for the Nia repository query API."""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import typing as typ

import httpx

from niabridge.logging import get_logger, log_debug, log_info, log_warning
from niabridge.nia.errors import (
    NiaAPIError,
    NiaConfigError,
    NiaQueryError,
    NiaResponseShapeError,
)
from niabridge.nia.prompts import build_analysis_prompt, build_simplified_prompt

if typ.TYPE_CHECKING:
    from niabridge.nia.cache import QueryCache
    from niabridge.nia.config import NiaQueryConfig

logger = get_logger(__name__)

# The primary request plus one simplified retry after a 4xx response.
_MAX_ATTEMPTS = 2

AnswerExtractor = cabc.Callable[[dict[str, object]], object]


def _from_choices(data: dict[str, object]) -> object:
    """Read the OpenAI-style ``choices[0].message.content`` field."""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first_choice = choices[0]
    if not isinstance(first_choice, dict):
        return None
    message = typ.cast("dict[str, object]", first_choice).get("message")
    if not isinstance(message, dict):
        return None
    return typ.cast("dict[str, object]", message).get("content")


def _from_key(key: str) -> AnswerExtractor:
    def _extract(data: dict[str, object]) -> object:
        return data.get(key)

    _extract.__name__ = f"_from_{key}"
    return _extract


# The Nia response schema is not stable across API versions: the answer has
# been observed under each of these fields. Extractors run in order and the
# first non-blank string wins.
ANSWER_EXTRACTORS: tuple[AnswerExtractor, ...] = (
    _from_choices,
    _from_key("answer"),
    _from_key("content"),
    _from_key("message"),
)


def extract_answer(data: dict[str, object]) -> str | None:
    """Return the first populated answer among the known response shapes."""
    for extractor in ANSWER_EXTRACTORS:
        value = extractor(data)
        if isinstance(value, str) and value.strip():
            return value
    return None


class NiaQueryClient:
    """Ask Nia how to implement an issue within the configured repository.

    ``query`` never raises: timeouts, network failures, error statuses and
    empty answers are logged and reported as ``None``.

    Parameters
    ----------
    config
        Configuration for the Nia API.
    cache
        Optional answer cache consulted before any network call.
    http_client
        Optional ``httpx.AsyncClient`` for testing. If not provided, the
        instance creates and owns its own client.

    Examples
    --------
    >>> import asyncio
    >>> from niabridge.nia import NiaQueryClient, NiaQueryConfig, QueryCache
    >>> config = NiaQueryConfig(api_key="nk-...", repository="acme/widgets")
    >>> client = NiaQueryClient(config, cache=QueryCache())
    >>> # analysis = asyncio.run(client.query("Add retry", None))
    >>> asyncio.run(client.aclose())

    """

    def __init__(
        self,
        config: NiaQueryConfig,
        *,
        cache: QueryCache | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with configuration."""
        if not config.api_key.strip():
            raise NiaConfigError.empty_api_key()

        self._config = config
        self._cache = cache
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
        )

    @property
    def config(self) -> NiaQueryConfig:
        """Read-only access to the client configuration."""
        return self._config

    @property
    def cache(self) -> QueryCache | None:
        """Return the answer cache, when one is configured."""
        return self._cache

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def query(self, title: str, description: str | None = None) -> str | None:
        """Return Nia's analysis of an issue, or ``None`` when unavailable.

        Parameters
        ----------
        title
            Issue title; also the cache key after normalisation.
        description
            Optional issue description included in the primary prompt.

        Returns
        -------
        str | None
            Analysis text, or ``None`` on timeout, network error, error
            status or an empty answer.

        """
        if self._cache is not None:
            cached = self._cache.get(title)
            if cached is not None:
                log_debug(logger, "Nia cache hit for %r", title)
                return cached

        log_info(logger, "Requesting Nia analysis for %r", title)
        analysis = await self._query_with_retry(title, description)
        if analysis is not None and self._cache is not None:
            self._cache.put(title, analysis)
        return analysis

    async def _query_with_retry(
        self, title: str, description: str | None
    ) -> str | None:
        for attempt in range(_MAX_ATTEMPTS):
            simplified = attempt > 0
            payload = self.build_payload(title, description, simplified=simplified)
            try:
                return await self._call(payload)
            except NiaAPIError as exc:
                if exc.is_client_error and not simplified:
                    log_warning(
                        logger,
                        "Nia rejected query for %r (HTTP %s); retrying once "
                        "with a simplified query",
                        title,
                        exc.status_code,
                    )
                    continue
                log_warning(logger, "Nia query for %r failed: %s", title, exc)
                return None
            except NiaQueryError as exc:
                log_warning(
                    logger, "Nia query for %r returned no answer: %s", title, exc
                )
                return None
        return None

    def build_payload(
        self,
        title: str,
        description: str | None,
        *,
        simplified: bool = False,
    ) -> dict[str, object]:
        """Construct the request body for a primary or simplified query.

        Parameters
        ----------
        title
            Issue title.
        description
            Issue description; omitted from the simplified query.
        simplified
            Build the short fallback query instead of the full instruction.

        Returns
        -------
        dict[str, object]
            JSON-serialisable request body.

        """
        repository = self._config.repository
        if simplified:
            content = build_simplified_prompt(repository, title)
        else:
            content = build_analysis_prompt(repository, title, description)
        return {
            "messages": [{"role": "user", "content": content}],
            "search_mode": self._config.search_mode,
            "resource_ids": [repository],
            "model_name": self._config.model,
        }

    async def _call(self, payload: dict[str, object]) -> str:
        response = await self._send_request(payload)
        if not response.is_success:
            raise NiaAPIError.http_error(response.status_code)
        data = self._parse_json_response(response)
        answer = extract_answer(data)
        if answer is None:
            raise NiaResponseShapeError.missing_answer(list(data))
        return answer

    async def _send_request(self, payload: dict[str, object]) -> httpx.Response:
        """POST ``payload`` to the query endpoint.

        Raises
        ------
        NiaAPIError
            If a timeout or network error occurs. The timeout bounds the
            whole exchange, not only each connect or read.

        """
        try:
            async with asyncio.timeout(self._config.timeout_s):
                return await self._client.post(
                    self._config.endpoint,
                    json=payload,
                    timeout=self._config.timeout_s,
                )
        except (httpx.TimeoutException, TimeoutError) as exc:
            raise NiaAPIError.timeout(self._config.timeout_s) from exc
        except httpx.RequestError as exc:
            raise NiaAPIError.network_error(str(exc)) from exc

    def _parse_json_response(self, response: httpx.Response) -> dict[str, object]:
        try:
            data = response.json()
        except ValueError as exc:
            raise NiaResponseShapeError.invalid_json(response.text) from exc
        if not isinstance(data, dict):
            raise NiaResponseShapeError.invalid_json(response.text)
        return typ.cast("dict[str, object]", data)
