"""Drive non-suspending coroutines from blocking code."""

from __future__ import annotations

import typing

_T = typing.TypeVar("_T")


def iter_coroutine(coro: typing.Coroutine[None, None, _T]) -> _T:
    """
    Run ``coro`` to completion without an event loop.

    The blocking blob client shares its implementation with the asyncio one:
    every ``await`` in that shared code resolves immediately when the backend
    is blocking, so a single ``send(None)`` finishes the coroutine.

    Raises:
        RuntimeError: If ``coro`` tries to suspend.
    """
    try:
        coro.send(None)
    except StopIteration as stop:
        return stop.value  # type: ignore [no-any-return]
    else:
        raise RuntimeError(f"coroutine {coro!r} suspended; it needs an event loop")
    finally:
        coro.close()


__all__ = ["iter_coroutine"]
