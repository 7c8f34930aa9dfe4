"""
Compute boundary: the asynchronous channel to the worker that searches for computer moves.

The game side hands over a SearchRequest and a reply handler. The handler is called exactly once per request,
from whichever thread the worker finishes on, with the request it answers and the move found (None if there is none).
"""

import logging
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Callable, Optional, Protocol

from src.core.config import EngineConfig
from src.core.models import SearchReply, SearchRequest
from src.engine.search import UciEngineSearch, negamax_search

logger = logging.getLogger(__name__)

SearchFn = Callable[[str, int], Optional[str]]
ReplyHandler = Callable[[SearchReply], None]


class ComputeBoundary(Protocol):
    """Fire-and-forget search requests with a one-shot reply."""

    def submit(self, request: SearchRequest, on_reply: ReplyHandler) -> None: ...


class ExecutorComputeBoundary:
    """
    Run a search function on a concurrent.futures Executor.
    ----

    * By default a single worker thread, so searches run one after the other.
    * A failing search is logged and answered with an empty reply: the caller never sees the exception.
    * No cancellation: once submitted, a search runs to completion.
    """

    def __init__(self, search: SearchFn, executor: Optional[Executor] = None) -> None:
        self.search = search
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="search"
        )

    def submit(self, request: SearchRequest, on_reply: ReplyHandler) -> None:
        logger.debug("Submitting search request %s", request.to_message())
        future = self._executor.submit(self.search, request.fen, request.depth)
        future.add_done_callback(
            lambda done: on_reply(self._to_reply(request, done))
        )

    def shutdown(self) -> None:
        """Wait for running searches and release the worker(s)."""
        self._executor.shutdown(wait=True)
        if isinstance(self.search, UciEngineSearch):
            self.search.close()

    def _to_reply(self, request: SearchRequest, future: Future) -> SearchReply:
        exception = future.exception()
        if exception is not None:
            logger.error(
                "Search failed for request %d (fen=%s)",
                request.request_id,
                request.fen,
                exc_info=exception,
            )
            return SearchReply(request=request, move=None)
        return SearchReply(request=request, move=future.result())


def build_compute_boundary(config: EngineConfig) -> ExecutorComputeBoundary:
    """Pick the search worker the configuration asks for."""
    if config.uci_engine_path:
        logger.info("Searching with UCI engine %s", config.uci_engine_path)
        return ExecutorComputeBoundary(UciEngineSearch(config.uci_engine_path))

    if config.search_processes > 0:
        logger.info("Searching with %d process(es)", config.search_processes)
        return ExecutorComputeBoundary(
            negamax_search, ProcessPoolExecutor(max_workers=config.search_processes)
        )

    return ExecutorComputeBoundary(negamax_search)
