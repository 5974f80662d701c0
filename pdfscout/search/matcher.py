"""
Bounded pattern matching over one page of text.

Python's `re` cannot be interrupted once a match attempt starts, and the
attempt holds the GIL, so a thread cannot be abandoned mid-match. A
scan therefore runs in a single worker process that the caller waits on
for at most `timeout_ms`. If the clock wins the worker is terminated,
SearchTimeoutError is raised, and the next scan starts a fresh worker.

The whole match list for a page is built eagerly, so the timeout covers
the complete scan rather than one match at a time. Inside the worker
the deadline is also checked after every match attempt.

`run_with_timeout` is the thread-based variant used for work that must
stay in-process, such as text extraction callbacks.
"""

from __future__ import annotations

import logging
import multiprocessing
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, TypeVar

from pdfscout.config import MAX_MATCHES_PER_PAGE
from pdfscout.exceptions import ExcessiveMatchesError, SearchTimeoutError
from pdfscout.models import TextMatch
from pdfscout.search.patterns import CompiledPattern

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _DeadlineExpired(Exception):
    """Raised inside the worker once the scan has run past its deadline."""


def run_with_timeout(func: Callable[[], T], timeout_ms: int, *, name: str = "pdfscout-worker") -> T:
    """
    Run `func` on a daemon thread and wait at most `timeout_ms` for it.

    Exceptions raised by `func` propagate to the caller.

    Raises:
        TimeoutError: If `func` did not finish in time
    """
    future: Future[T] = Future()

    def _target() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(func())
        except BaseException as e:  # Re-raised in the caller's thread
            future.set_exception(e)

    worker = threading.Thread(target=_target, name=name, daemon=True)
    worker.start()
    try:
        return future.result(timeout=timeout_ms / 1000)
    except FutureTimeoutError:
        raise TimeoutError(f"Timed out after {timeout_ms}ms") from None


def find_matches(
    text: str,
    pattern: CompiledPattern,
    *,
    max_matches: int = MAX_MATCHES_PER_PAGE,
    deadline: float | None = None,
) -> list[TextMatch]:
    """
    Collect matches of `pattern` in `text`, left to right.

    Zero-width matches advance the scan position by one character so
    patterns like "/x*/g" cannot stall on the same offset. This holds for
    sticky patterns too: the next attempt is anchored one past the empty
    match.

    Args:
        text: Page text
        pattern: Compiled pattern
        max_matches: Ceiling; exceeding it raises ExcessiveMatchesError
        deadline: time.monotonic() value after which the scan aborts

    Returns:
        Matches in text order
    """
    regex = pattern.regex
    matches: list[TextMatch] = []
    pos = 0
    length = len(text)

    while pos <= length:
        if pattern.sticky:
            m = regex.match(text, pos)
        else:
            m = regex.search(text, pos)

        if deadline is not None and time.monotonic() > deadline:
            raise _DeadlineExpired()
        if m is None:
            break

        matches.append(TextMatch(start=m.start(), end=m.end(), text=m.group(0)))
        if len(matches) > max_matches:
            raise ExcessiveMatchesError(max_matches)
        if not pattern.find_all:
            break

        pos = m.end() + 1 if m.end() == m.start() else m.end()

    return matches


def _ready() -> bool:
    return True


def _scan_in_worker(
    text: str, pattern: CompiledPattern, max_matches: int, timeout_ms: int
) -> list[TextMatch]:
    """Pool entry point; the deadline is taken from the worker's own clock."""
    deadline = time.monotonic() + timeout_ms / 1000
    return find_matches(text, pattern, max_matches=max_matches, deadline=deadline)


class BoundedMatcher:
    """
    Scans page text with a wall-clock timeout and a match ceiling.

    The worker process is started on the first scan and reused until it
    times out or the matcher is closed.

    Usage:
        with BoundedMatcher() as matcher:
            matches = matcher.scan(page_text, compile_pattern("budget"), timeout_ms=10_000)
    """

    def __init__(self, max_matches: int = MAX_MATCHES_PER_PAGE):
        self.max_matches = max_matches
        self._pool = None

    def __enter__(self) -> BoundedMatcher:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Stop the worker process, if one is running."""
        if self._pool is not None:
            self._pool.terminate()
            self._pool.join()
            self._pool = None

    def scan(self, text: str, pattern: CompiledPattern, timeout_ms: int) -> list[TextMatch]:
        """
        Find all matches of `pattern` in `text` within `timeout_ms`.

        Raises:
            SearchTimeoutError: If the scan takes longer than timeout_ms
            ExcessiveMatchesError: If more than max_matches matches are found
        """
        if self._pool is None:
            self._pool = multiprocessing.get_context("spawn").Pool(processes=1)
            # Startup time is not charged to the first page
            self._pool.apply(_ready)
        deadline = time.monotonic() + timeout_ms / 1000

        pending = self._pool.apply_async(
            _scan_in_worker, (text, pattern, self.max_matches, timeout_ms)
        )
        try:
            matches = pending.get(timeout=timeout_ms / 1000)
        except multiprocessing.TimeoutError:
            # The worker may be stuck inside a single match attempt
            logger.debug("Killing scan worker after %dms (pattern %s)", timeout_ms, pattern.to_dict())
            self.close()
            raise SearchTimeoutError(timeout_ms) from None
        except _DeadlineExpired:
            raise SearchTimeoutError(timeout_ms) from None

        if time.monotonic() > deadline:
            raise SearchTimeoutError(timeout_ms)
        return matches
