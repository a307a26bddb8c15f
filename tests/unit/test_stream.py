"""Tests for draining download streams."""

import os

import pytest

from simple_storage._iter_coroutine import iter_coroutine
from simple_storage.blob._stream import (
    stream_to_bytes,
    stream_to_file,
    stream_to_string,
)
from simple_storage.blob.types import ProgressEvent


async def _agen(chunks):
    for chunk in chunks:
        yield chunk


def _failing(chunks, error):
    yield from chunks
    raise error


class TestStreamToBytes:
    def test_sync_source_without_event_loop(self):
        events: list[ProgressEvent] = []

        data = iter_coroutine(
            stream_to_bytes([b"ab", b"cd", b"e"], 5, events.append, await_callback=False)
        )

        assert data == b"abcde"
        assert [(e.loaded_bytes, e.percent_complete) for e in events] == [
            (2, 40),
            (4, 80),
            (5, 100),
        ]

    @pytest.mark.asyncio
    async def test_async_source_and_async_callback(self):
        events: list[ProgressEvent] = []

        async def on_progress(event):
            events.append(event)

        data = await stream_to_bytes(_agen([b"abc", b"def"]), 6, on_progress)

        assert data == b"abcdef"
        assert [e.loaded_bytes for e in events] == [3, 6]

    def test_unknown_total(self):
        events: list[ProgressEvent] = []

        iter_coroutine(stream_to_bytes([b"ab", b"c"], None, events.append, await_callback=False))

        assert events == [ProgressEvent(2), ProgressEvent(3)]

    def test_empty_source_emits_one_final_event(self):
        events: list[ProgressEvent] = []

        data = iter_coroutine(stream_to_bytes([], 0, events.append, await_callback=False))

        assert data == b""
        assert events == [ProgressEvent(0, 0, 100)]

    def test_empty_chunks_are_skipped(self):
        events: list[ProgressEvent] = []

        iter_coroutine(stream_to_bytes([b"", b"a", b""], 1, events.append, await_callback=False))

        assert [e.loaded_bytes for e in events] == [1]

    def test_percent_never_exceeds_100(self):
        events: list[ProgressEvent] = []

        # the service sent more than it announced
        iter_coroutine(stream_to_bytes([b"abc", b"def"], 4, events.append, await_callback=False))

        assert [e.percent_complete for e in events] == [75, 100]

    def test_read_errors_propagate(self):
        with pytest.raises(ConnectionError):
            iter_coroutine(stream_to_bytes(_failing([b"a"], ConnectionError("reset"))))


class TestStreamToString:
    def test_decodes_with_encoding(self):
        text = iter_coroutine(stream_to_string(["ü".encode("utf-16")], "utf-16"))

        assert text == "ü"

    def test_multibyte_split_across_chunks(self):
        raw = "✓".encode()

        assert iter_coroutine(stream_to_string([raw[:1], raw[1:]])) == "✓"


class TestStreamToFile:
    def test_writes_file_and_creates_directories(self, tmp_path):
        dst = tmp_path / "a" / "b" / "out.bin"

        written = iter_coroutine(stream_to_file([b"12", b"34"], dst))

        assert written == 4
        assert dst.read_bytes() == b"1234"
        assert not os.path.exists(f"{dst}.part")

    def test_relative_path_in_current_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        iter_coroutine(stream_to_file([b"x"], "out.txt"))

        assert (tmp_path / "out.txt").read_bytes() == b"x"

    def test_failure_removes_partial_file(self, tmp_path):
        dst = tmp_path / "out.bin"

        with pytest.raises(ConnectionError):
            iter_coroutine(stream_to_file(_failing([b"partial"], ConnectionError("reset")), dst))

        assert not dst.exists()
        assert not os.path.exists(f"{dst}.part")

    @pytest.mark.asyncio
    async def test_async_source(self, tmp_path):
        dst = tmp_path / "out.bin"
        events: list[ProgressEvent] = []

        await stream_to_file(_agen([b"ab", b"cd"]), dst, 4, events.append)

        assert dst.read_bytes() == b"abcd"
        assert events[-1] == ProgressEvent(4, 4, 100)
