"""Drain download streams into memory or onto disk, reporting progress per chunk."""

from __future__ import annotations

import inspect
import os
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from contextlib import aclosing
from os import PathLike
from typing import TypeVar, cast

from .types import OnProgressCallback, ProgressEvent
from .utils import make_progress_event

_T = TypeVar("_T")

ChunkSource = Iterable[bytes] | AsyncIterable[bytes]


async def _emit_progress(
    callback: OnProgressCallback | None,
    event: ProgressEvent,
    *,
    await_callback: bool,
) -> None:
    if callback is None:
        return

    result = callback(event)
    if await_callback and inspect.isawaitable(result):
        await cast(Awaitable[None], result)


async def iterate(source: Iterable[_T] | AsyncIterable[_T]) -> AsyncIterator[_T]:
    # blocking sources are walked inline so the sync client never suspends
    if hasattr(source, "__aiter__"):
        async for item in cast(AsyncIterable[_T], source):
            yield item
    else:
        for item in cast(Iterable[_T], source):
            yield item


async def _drain(
    source: ChunkSource,
    total_bytes: int | None,
    on_progress: OnProgressCallback | None,
    *,
    await_callback: bool,
    sink: Callable[[bytes], object],
) -> int:
    loaded = 0
    emitted = False
    async with aclosing(iterate(source)) as chunks:
        async for chunk in chunks:
            if not chunk:
                continue
            sink(bytes(chunk))
            loaded += len(chunk)
            if on_progress is not None:
                await _emit_progress(
                    on_progress,
                    make_progress_event(loaded, total_bytes),
                    await_callback=await_callback,
                )
                emitted = True

    if on_progress is not None and not emitted:
        await _emit_progress(
            on_progress,
            make_progress_event(loaded, total_bytes),
            await_callback=await_callback,
        )
    return loaded


async def stream_to_bytes(
    source: ChunkSource,
    total_bytes: int | None = None,
    on_progress: OnProgressCallback | None = None,
    *,
    await_callback: bool = True,
) -> bytes:
    chunks: list[bytes] = []
    await _drain(
        source,
        total_bytes,
        on_progress,
        await_callback=await_callback,
        sink=chunks.append,
    )
    return b"".join(chunks)


async def stream_to_string(
    source: ChunkSource,
    encoding: str = "utf-8",
    total_bytes: int | None = None,
    on_progress: OnProgressCallback | None = None,
    *,
    await_callback: bool = True,
) -> str:
    data = await stream_to_bytes(
        source, total_bytes, on_progress, await_callback=await_callback
    )
    return data.decode(encoding)


async def stream_to_file(
    source: ChunkSource,
    file_path: str | PathLike,
    total_bytes: int | None = None,
    on_progress: OnProgressCallback | None = None,
    *,
    await_callback: bool = True,
) -> int:
    """Write ``source`` to ``file_path``, creating parent directories first.

    Bytes go to ``<file_path>.part`` and replace the destination only once the
    stream is exhausted; the partial file is removed on any failure.
    """
    dst = os.fspath(file_path)
    os.makedirs(os.path.dirname(dst) or ".", exist_ok=True)

    tmp = dst + ".part"
    try:
        with open(tmp, "wb") as f:
            written = await _drain(
                source,
                total_bytes,
                on_progress,
                await_callback=await_callback,
                sink=f.write,
            )
        os.replace(tmp, dst)
    except BaseException:
        try:
            if os.path.exists(tmp):
                os.remove(tmp)
        finally:
            raise
    return written


__all__ = [
    "ChunkSource",
    "iterate",
    "stream_to_bytes",
    "stream_to_file",
    "stream_to_string",
]
