"""Shared worker pool and future composition helpers."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from functools import partial
from typing import Any, Protocol, Self


class TaskRunner(Protocol):
    """Submit units of work to a shared pool."""

    def submit[T](
        self, fn: Callable[..., T], /, *args: Any, **kwargs: Any
    ) -> Future[T]:
        """Schedule `fn(*args, **kwargs)` and return its future.

        Args:
            fn: Unit of work.
            *args: Positional arguments for `fn`.
            **kwargs: Keyword arguments for `fn`.
        """


class ThreadPoolTaskRunner:
    """TaskRunner backed by a `ThreadPoolExecutor`."""

    def __init__(self, *, max_workers: int = 4) -> None:
        """Create worker pool.

        Args:
            max_workers: Pool size.
        """
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="mapforge-task"
        )

    def submit[T](
        self, fn: Callable[..., T], /, *args: Any, **kwargs: Any
    ) -> Future[T]:
        """Schedule one unit of work on the pool."""
        return self._pool.submit(fn, *args, **kwargs)

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop accepting work and optionally wait for running tasks."""
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown(wait=True)


def completed[T](value: T) -> Future[T]:
    """Return an already-successful future."""
    future: Future[T] = Future()
    future.set_result(value)
    return future


def failed(exc: BaseException) -> Future[Any]:
    """Return an already-failed future carrying `exc`."""
    future: Future[Any] = Future()
    future.set_exception(exc)
    return future


def _copy_outcome[T](source: Future[T], target: Future[T]) -> None:
    """Mirror a finished `source` into `target` unless `target` was cancelled."""
    if not target.set_running_or_notify_cancel():
        return
    if source.cancelled():
        target.set_exception(CancelledError())
        return
    exc = source.exception()
    if exc is not None:
        target.set_exception(exc)
    else:
        target.set_result(source.result())


def follow[T](source: Future[T]) -> Future[T]:
    """Return a caller-owned future that resolves with `source`.

    Cancelling the returned future detaches only that caller; `source` and
    any other follower still complete.

    Args:
        source: Shared future.

    Returns:
        New future mirroring `source`.
    """
    follower: Future[T] = Future()
    source.add_done_callback(partial(_copy_outcome, target=follower))
    return follower


def chain[T, U](upstream: Future[T], then: Callable[[T], Future[U]]) -> Future[U]:
    """Compose `then` after `upstream` without blocking a worker.

    The first failure short-circuits: if `upstream` fails, `then` never runs
    and the returned future fails with the same exception. Cancelling the
    returned future does not stop either stage.

    Args:
        upstream: Future of the first stage.
        then: Callback that starts the second stage from the first result.

    Returns:
        Future of the second stage.
    """
    downstream: Future[U] = Future()

    def _on_upstream(done: Future[T]) -> None:
        if done.cancelled() or done.exception() is not None:
            _copy_outcome(done, downstream)  # type: ignore[arg-type]
            return
        try:
            next_stage = then(done.result())
        except Exception as stage_exc:  # noqa: BLE001
            if downstream.set_running_or_notify_cancel():
                downstream.set_exception(stage_exc)
            return
        next_stage.add_done_callback(partial(_copy_outcome, target=downstream))

    upstream.add_done_callback(_on_upstream)
    return downstream
