"""Bounded polling for asynchronous readiness checks.

``poll_until`` evaluates a predicate until it is truthy, sleeping a fixed
interval between evaluations, and gives up after ``retry_limit`` retries
(``retry_limit + 1`` evaluations in total). The URL and file waiters are the
two concrete uses: a dev server answering HTTP, and a build artefact
appearing on disk.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from e2erunner.core.exceptions import RetryExhaustedError

logger = logging.getLogger(__name__)

DEFAULT_RETRY_LIMIT = 10
DEFAULT_INTERVAL_SECONDS = 1.0
DEFAULT_HTTP_TIMEOUT_SECONDS = 5.0

Predicate = Callable[[], Union[bool, Awaitable[bool]]]


async def poll_until(
    predicate: Predicate,
    *,
    retry_limit: int = DEFAULT_RETRY_LIMIT,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    description: str = "condition",
) -> bool:
    """Evaluate ``predicate`` until it returns a truthy value.

    A predicate that raises counts as a failed attempt. The first success
    returns immediately without sleeping.

    Args:
        predicate: Sync or async callable returning a truthy value when ready.
        retry_limit: Retries after the first evaluation (0 means evaluate once).
        interval_seconds: Delay between evaluations.
        description: Label used in logs and in the exhaustion error.

    Returns:
        True once the predicate succeeded.

    Raises:
        ValueError: Negative ``retry_limit`` or ``interval_seconds``.
        RetryExhaustedError: The predicate never succeeded; ``attempts`` holds
            the number of evaluations.
    """
    if retry_limit < 0:
        raise ValueError(f"retry_limit must be >= 0 (got {retry_limit})")
    if interval_seconds < 0:
        raise ValueError(f"interval_seconds must be >= 0 (got {interval_seconds})")

    retries = 0
    last_error: Optional[BaseException] = None
    while True:
        try:
            result: Any = predicate()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:  # noqa: BLE001 - any predicate failure is a failed attempt
            last_error = e
            result = False
            logger.debug("%s: attempt %d raised %r", description, retries + 1, e)

        if result:
            if retries:
                logger.debug("%s: ready after %d attempts", description, retries + 1)
            return True

        if retries >= retry_limit:
            attempts = retries + 1
            logger.warning("%s: not ready after %d attempts", description, attempts)
            context = {"description": description}
            if last_error is not None:
                context["last_error"] = repr(last_error)
            raise RetryExhaustedError(
                f"{description} not ready after {attempts} attempts",
                attempts=attempts,
                retry_limit=retry_limit,
                context=context,
            )

        retries += 1
        logger.debug(
            "%s: attempt %d/%d failed, retrying in %ss", description, retries, retry_limit + 1, interval_seconds
        )
        await asyncio.sleep(interval_seconds)


def _http_get_ok(url: str, *, timeout_seconds: float, debug: bool = False) -> bool:
    req = Request(url, method="GET")
    try:
        with urlopen(req, timeout=timeout_seconds) as resp:
            if debug:
                body = resp.read(2048)
                logger.debug("GET %s -> %s %r", url, resp.status, body)
            return True
    except HTTPError as e:
        # The server is up but the page is not ready yet.
        logger.debug("GET %s -> HTTP %s", url, e.code)
        return False
    except (URLError, OSError) as e:
        logger.debug("GET %s failed: %s", url, e)
        return False


async def wait_for_url(
    url: str,
    *,
    retry_limit: int = DEFAULT_RETRY_LIMIT,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    debug: bool = False,
) -> bool:
    """Poll until an HTTP GET of ``url`` returns a non-error status."""
    logger.info("Waiting for %s", url)

    async def _probe() -> bool:
        return await asyncio.to_thread(_http_get_ok, url, timeout_seconds=timeout_seconds, debug=debug)

    return await poll_until(
        _probe,
        retry_limit=retry_limit,
        interval_seconds=interval_seconds,
        description=f"url {url}",
    )


async def wait_for_file(
    path: Union[str, Path],
    *,
    retry_limit: int = DEFAULT_RETRY_LIMIT,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
) -> bool:
    """Poll until ``path`` exists."""
    target = Path(path)
    logger.info("Waiting for file %s", target)
    return await poll_until(
        target.exists,
        retry_limit=retry_limit,
        interval_seconds=interval_seconds,
        description=f"file {target}",
    )


__all__ = [
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
    "DEFAULT_INTERVAL_SECONDS",
    "DEFAULT_RETRY_LIMIT",
    "poll_until",
    "wait_for_file",
    "wait_for_url",
]
