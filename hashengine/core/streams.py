"""Feeding files and streams into hash contexts.

Reads happen in ``stream_chunk_size`` pieces. A read failure is raised
as StreamReadError; whatever was consumed before the failure stays in
the context, which is left active and unfinalized.
"""

import os
from typing import BinaryIO, Iterator

from hashengine.config import get_settings

from .context import HashContext
from .errors import InvalidContextStateError, StreamReadError


def iter_chunks(
    stream: BinaryIO,
    length: int = -1,
    chunk_size: int | None = None,
) -> Iterator[bytes]:
    """Yield chunks read from ``stream``.

    Args:
        stream: Binary file-like object
        length: Maximum bytes to read; negative reads to EOF
        chunk_size: Read size (defaults to settings.stream_chunk_size)

    Raises:
        StreamReadError: If a read fails
    """
    chunk_size = chunk_size or get_settings().stream_chunk_size
    remaining = length
    while remaining != 0:
        to_read = chunk_size if remaining < 0 else min(chunk_size, remaining)
        try:
            chunk = stream.read(to_read)
        except OSError as e:
            raise StreamReadError(f"Stream read failed: {e}") from e
        if not chunk:
            return
        if remaining > 0:
            remaining -= len(chunk)
        yield chunk


def iter_file_chunks(path: str | os.PathLike, chunk_size: int | None = None) -> Iterator[bytes]:
    """Yield the contents of the file at ``path`` in chunks.

    Raises:
        StreamReadError: If the file cannot be opened or read
    """
    try:
        f = open(path, "rb")
    except OSError as e:
        raise StreamReadError(f"Cannot open {os.fspath(path)!r}: {e}") from e
    with f:
        yield from iter_chunks(f, chunk_size=chunk_size)


def _require_active(ctx: HashContext, operation: str) -> None:
    if not ctx.active:
        raise InvalidContextStateError(f"{operation}(): hash context is {ctx.state.value}")


def update_from_stream(ctx: HashContext, stream: BinaryIO, length: int = -1) -> int:
    """Pump up to ``length`` bytes (negative: until EOF) from ``stream``.

    Returns:
        Number of bytes fed into the context
    """
    _require_active(ctx, "update_from_stream")
    consumed = 0
    for chunk in iter_chunks(stream, length):
        ctx.update(chunk)
        consumed += len(chunk)
    return consumed


def update_from_file(ctx: HashContext, path: str | os.PathLike) -> int:
    """Pump the whole file at ``path`` into the context.

    Returns:
        Number of bytes fed into the context
    """
    _require_active(ctx, "update_from_file")
    consumed = 0
    for chunk in iter_file_chunks(path):
        ctx.update(chunk)
        consumed += len(chunk)
    return consumed
