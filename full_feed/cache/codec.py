"""Gzip codec for cached article content."""

import gzip
import zlib

from full_feed.errors import CorruptDataError

ENCODING = "utf-8"


def compress(text: str) -> bytes:
    """Compress a content string into a gzip byte sequence.

    ``mtime`` is pinned so equal inputs yield equal bytes.
    """
    return gzip.compress(text.encode(ENCODING), mtime=0)


def decompress(data: bytes) -> str:
    """Decompress gzip bytes back into the original content string.

    Raises:
        CorruptDataError: If the bytes are not valid gzip or not valid UTF-8
    """
    # gzip.decompress accepts b"" silently; compress() never produces it
    if not data:
        raise CorruptDataError("Cannot decompress empty cached content")

    try:
        raw = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise CorruptDataError(
            f"Cannot decompress cached content: {e}", details={"size": len(data)}
        ) from e

    try:
        return raw.decode(ENCODING)
    except UnicodeDecodeError as e:
        raise CorruptDataError(
            f"Cached content is not valid {ENCODING}: {e}", details={"size": len(data)}
        ) from e
