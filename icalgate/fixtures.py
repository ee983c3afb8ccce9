"""Library for maintaining the cache of real-world calendar fixtures.

Fixtures are calendar documents captured from external providers. They are
kept in a local directory keyed by file name and fetched only when missing,
so a run that failed part way through can be re-invoked and will skip any
source that was already downloaded. Presence of the file is the only thing
checked, there is no content hashing or expiry. Removing a file from the
directory is the way to force a fresh copy.

This is an example of populating a cache directory:
```python
from pathlib import Path
from icalgate.fixtures import DEFAULT_SOURCES, FixtureCache

FixtureCache(Path("private-test-icals"), DEFAULT_SOURCES).ensure()
```
"""

from __future__ import annotations

import enum
import logging
import pathlib
import time
from collections.abc import Callable, Sequence
from importlib import metadata
from types import TracebackType

import httpx
from pydantic import BaseModel, ConfigDict, field_validator

from .corpus import CORPUS_SUFFIXES
from .exceptions import FetchError

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_SOURCES",
    "FixtureCache",
    "FixtureSource",
    "HttpFetcher",
    "PresencePolicy",
    "ensure",
]

VERSION = metadata.version("icalgate")
USER_AGENT = f"icalgate/{VERSION}"
DEFAULT_TIMEOUT = 60.0
PARTIAL_SUFFIX = ".part"

Fetch = Callable[[str], bytes]
"""A function that returns the full body at a url or raises on failure.

Fetch functions are expected to raise `httpx.HTTPError` or `OSError`.
"""


class PresencePolicy(str, enum.Enum):
    """Policy for deciding when a cached fixture is fetched."""

    FETCH_IF_ABSENT = "fetch-if-absent"
    """Fetch only when the file is not present in the cache directory."""

    ALWAYS_REFETCH = "always-refetch"
    """Fetch on every run, overwriting the cached copy."""


class FixtureSource(BaseModel):
    """A calendar document sourced from an external provider."""

    model_config = ConfigDict(frozen=True)

    name: str
    """Unique name of the source, used in error messages."""

    url: str
    """The remote location of the document."""

    local_path: str
    """Path of the document relative to the cache directory."""

    presence_policy: PresencePolicy = PresencePolicy.FETCH_IF_ABSENT

    @field_validator("local_path")
    @classmethod
    def _validate_local_path(cls, value: str) -> str:
        """Ensure the path is a calendar document inside the cache directory."""
        path = pathlib.PurePosixPath(value)
        if not value or path.is_absolute() or ".." in path.parts:
            raise ValueError(
                f"local_path must be a relative path inside the cache: '{value}'"
            )
        if path.suffix.lower() not in CORPUS_SUFFIXES:
            raise ValueError(
                f"local_path must end with one of {CORPUS_SUFFIXES}: '{value}'"
            )
        return value


DEFAULT_SOURCES = [
    FixtureSource(
        name="bmi",
        url="https://www.bmi.com/events/ical",
        local_path="bmi.ics",
    ),
    FixtureSource(
        name="american-history",
        url="https://americanhistorycalendar.com/eventscalendar?format=ical&viewid=4",
        local_path="americanhistory.ics",
    ),
    FixtureSource(
        name="german-holidays",
        url="https://calendar.google.com/calendar/ical/de.german%23holiday%40group.v.calendar.google.com/public/basic.ics",  # pylint: disable=line-too-long
        local_path="german-holidays.ics",
    ),
]


def validate_sources(sources: Sequence[FixtureSource]) -> None:
    """Verify that no two sources share a name or a cache entry."""
    names: set[str] = set()
    paths: set[pathlib.PurePosixPath] = set()
    for source in sources:
        if source.name in names:
            raise ValueError(f"Duplicate fixture source name '{source.name}'")
        path = pathlib.PurePosixPath(source.local_path)
        if path in paths:
            raise ValueError(
                f"Fixture source '{source.name}' reuses local_path '{source.local_path}'"
            )
        names.add(source.name)
        paths.add(path)


class HttpFetcher:
    """Fetch documents over http, with optional bounded retries.

    A single attempt is made by default. With `retries` set, transport
    and status errors are retried with exponential backoff starting at
    `backoff` seconds.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        retries: int = 0,
        backoff: float = 1.0,
    ) -> None:
        """Initialize HttpFetcher."""
        if retries < 0:
            raise ValueError("retries must not be negative")
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=DEFAULT_TIMEOUT,
            follow_redirects=True,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "text/calendar, text/plain, */*",
            },
        )
        self._retries = retries
        self._backoff = backoff

    def __call__(self, url: str) -> bytes:
        """Return the body at the url, raising httpx.HTTPError on failure."""
        attempt = 0
        while True:
            try:
                response = self._client.get(url)
                response.raise_for_status()
                return response.content
            except httpx.HTTPError as err:
                if attempt >= self._retries:
                    raise
                delay = self._backoff * (2**attempt)
                attempt += 1
                _LOGGER.debug(
                    "Fetch of %s failed (%s), retry %s in %.1fs",
                    url,
                    err,
                    attempt,
                    delay,
                )
                time.sleep(delay)

    def close(self) -> None:
        """Close the http client if it was created here."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpFetcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class FixtureCache:
    """A directory of named calendar fixtures populated from remote sources."""

    def __init__(
        self,
        root: pathlib.Path,
        sources: Sequence[FixtureSource],
        fetch: Fetch | None = None,
    ) -> None:
        """Initialize FixtureCache.

        The `fetch` function defaults to a single attempt `HttpFetcher`.
        """
        validate_sources(sources)
        self._root = root
        self._sources = list(sources)
        self._fetch = fetch

    @property
    def root(self) -> pathlib.Path:
        """Return the cache directory."""
        return self._root

    def path(self, source: FixtureSource) -> pathlib.Path:
        """Return the location of the source within the cache directory."""
        return self._root / source.local_path

    def ensure(self) -> None:
        """Make sure every source is present in the cache directory.

        Sources are processed in order and the first failure raises a
        `FetchError`; sources after it are not fetched. Sources fetched
        before the failure stay in the cache for the next run.
        """
        self._root.mkdir(parents=True, exist_ok=True)
        if self._fetch is not None:
            self._ensure_all(self._fetch)
            return
        with HttpFetcher() as fetcher:
            self._ensure_all(fetcher)

    def _ensure_all(self, fetch: Fetch) -> None:
        for source in self._sources:
            self._ensure_source(source, fetch)

    def _ensure_source(self, source: FixtureSource, fetch: Fetch) -> None:
        target = self.path(source)
        if source.presence_policy == PresencePolicy.FETCH_IF_ABSENT and target.exists():
            _LOGGER.info("Fixture '%s' already cached at %s", source.name, target)
            return

        _LOGGER.info("Fetching fixture '%s' from %s", source.name, source.url)
        try:
            body = fetch(source.url)
        except (httpx.HTTPError, OSError) as err:
            raise FetchError(source, str(err) or type(err).__name__) from err

        # The target path only ever holds a complete document
        partial = target.with_name(target.name + PARTIAL_SUFFIX)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            partial.write_bytes(body)
            partial.replace(target)
        except OSError as err:
            partial.unlink(missing_ok=True)
            raise FetchError(source, f"Unable to write {target}: {err}") from err
        _LOGGER.debug("Wrote %s bytes to %s", len(body), target)


def ensure(
    root: pathlib.Path,
    sources: Sequence[FixtureSource],
    fetch: Fetch | None = None,
) -> None:
    """Populate the cache directory, see `FixtureCache.ensure`."""
    FixtureCache(root, sources, fetch=fetch).ensure()
