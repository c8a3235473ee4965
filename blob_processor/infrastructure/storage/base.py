"""
Helpers shared by the storage backends.
"""

import asyncio
import functools
from typing import Any, Callable, Optional, TypeVar

from ...core.blobs.models import ErrorKind, StorageError

T = TypeVar("T")

# HTTP statuses the storage services use for throttling and outages
TRANSIENT_HTTP_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run a blocking SDK call in the default executor.

    Both storage SDKs we use are synchronous. Running their calls in the
    thread pool keeps one slow request from stalling every other request
    on the event loop.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


def failure_message(action: str, blob_name: Optional[str], detail: str) -> str:
    """Build the user-facing message for a failed storage call."""
    if blob_name:
        return f"Unable to {action} {blob_name}, {detail}"
    return f"Unable to {action}, {detail}"


def storage_error(
    kind: ErrorKind,
    action: str,
    blob_name: Optional[str],
    detail: str,
) -> StorageError:
    return StorageError(kind, failure_message(action, blob_name, detail), blob_name=blob_name)
