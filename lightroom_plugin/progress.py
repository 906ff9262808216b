"""
Cancelable progress reporting for long-running operations.
"""

import threading
from contextlib import contextmanager
from typing import Callable, Optional

from tqdm import tqdm

from .logging_setup import get_logger

logger = get_logger(__name__)


class ProgressScope:
    """
    A visible, cancelable indicator for one phase of work.

    Subclasses render the progress; this base only tracks state. done() may be
    called any number of times and releases resources once.
    """

    def __init__(self, title: str, cancel_event: Optional[threading.Event] = None):
        self.title = title
        self.cancel_event = cancel_event or threading.Event()
        self.caption = title
        self.completed = 0
        self.total = 0
        self.is_done = False

    def set_caption(self, text: str) -> None:
        self.caption = text

    def set_portion_complete(self, done: int, total: int) -> None:
        self.completed = done
        self.total = total

    def is_canceled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def done(self) -> None:
        if self.is_done:
            return
        self.is_done = True
        self._close()

    def _close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.done()


class TqdmProgressScope(ProgressScope):
    """Progress scope rendered as a tqdm bar on the terminal."""

    def __init__(self, title: str, cancel_event: Optional[threading.Event] = None, disable: bool = False):
        super().__init__(title, cancel_event)
        self.bar = tqdm(total=None, desc=title, unit="item", leave=False, disable=disable)

    def set_caption(self, text: str) -> None:
        super().set_caption(text)
        self.bar.set_description(text, refresh=False)
        self.bar.refresh()

    def set_portion_complete(self, done: int, total: int) -> None:
        super().set_portion_complete(done, total)
        self.bar.total = total
        self.bar.n = done
        self.bar.refresh()

    def _close(self) -> None:
        if self.total:
            self.bar.n = self.completed
        self.bar.close()


ProgressFactory = Callable[[str, threading.Event], ProgressScope]


def tqdm_progress_factory(title: str, cancel_event: threading.Event) -> ProgressScope:
    return TqdmProgressScope(title, cancel_event)


@contextmanager
def progress_scope(title: str,
                   cancel_event: Optional[threading.Event] = None,
                   factory: Optional[ProgressFactory] = None):
    """
    Open a progress scope that is always closed, whatever way the block exits.

    Args:
        title: Title of the phase
        cancel_event: Shared cancellation event
        factory: Callable creating the scope (defaults to a tqdm bar)
    """
    factory = factory or tqdm_progress_factory
    scope = factory(title, cancel_event or threading.Event())
    logger.debug(f"Progress scope opened: {title}")
    try:
        yield scope
    finally:
        scope.done()
        logger.debug(f"Progress scope closed: {title}")
