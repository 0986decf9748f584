"""Parallel, cancellable search for a valid creator keypair."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Optional

from .exceptions import MiningCancelledError
from .identity import Creator

logger = logging.getLogger(__name__)

AcceptFn = Callable[[Creator], bool]


@dataclass(frozen=True)
class MineResult:
    creator: Creator
    attempts: int


def _search(stop: threading.Event, cancel: threading.Event,
            accept: AcceptFn) -> tuple[Optional[Creator], int]:
    attempts = 0
    while not (stop.is_set() or cancel.is_set()):
        creator = Creator.generate()
        attempts += 1
        if accept(creator):
            stop.set()
            return creator, attempts
    return None, attempts


def mine(
    parallelism: int = 1,
    cancel: Optional[threading.Event] = None,
    accept: Optional[AcceptFn] = None,
) -> MineResult:
    """Run ``parallelism`` workers until one finds an acceptable creator.

    Workers poll a shared stop event between attempts; the first winner sets
    it and the rest return their partial attempt counts. Attempts from every
    worker are summed into the result. Setting ``cancel`` stops the search;
    if that happens before a winner is found MiningCancelledError is raised.
    ``cancel`` is only read, so the same event can be reused across calls.
    A key generation error stops all workers and is re-raised.
    """
    if parallelism < 1:
        raise ValueError("parallelism must be at least 1")
    stop = threading.Event()
    if cancel is None:
        cancel = threading.Event()
    check = accept if accept is not None else Creator.is_valid

    winner: Optional[Creator] = None
    attempts = 0
    error: Optional[BaseException] = None
    with ThreadPoolExecutor(max_workers=parallelism, thread_name_prefix="s83-miner") as executor:
        futures = [executor.submit(_search, stop, cancel, check) for _ in range(parallelism)]
        try:
            for future in as_completed(futures):
                try:
                    creator, count = future.result()
                except Exception as e:
                    stop.set()
                    if error is None:
                        error = e
                    continue
                attempts += count
                if creator is not None and winner is None:
                    winner = creator
        except BaseException:
            # interrupted while waiting; workers must see the stop before shutdown joins them
            stop.set()
            raise

    if error is not None:
        raise error
    if winner is None:
        raise MiningCancelledError("Mining cancelled before a valid key was found", attempts)
    logger.debug("Mined %s after %d attempts", winner, attempts)
    return MineResult(winner, attempts)
