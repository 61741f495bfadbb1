"""Binary encoding of description embeddings.

The sidecar format is a bare little-endian float32 array. Older index
files stored embeddings inline as base64 text in one of three shapes,
all of which are still readable:

* quantized: int32 length, float32 scale, then ``length`` signed bytes
* gzip-compressed float32 array
* raw float32 array
"""

import base64
import binascii
import gzip
import struct
import zlib
from collections.abc import Sequence

import numpy as np

_FLOAT32 = np.dtype("<f4")
_QUANTIZED_HEADER = struct.Struct("<if")


def serialize_binary(embedding: Sequence[float] | np.ndarray) -> bytes:
    """Encode an embedding as little-endian float32 bytes."""
    return np.asarray(embedding, dtype=_FLOAT32).tobytes()


def deserialize_binary(buffer: bytes) -> list[float]:
    """Decode little-endian float32 bytes.

    An empty buffer, or one whose length is not a multiple of four,
    decodes to an empty list.
    """
    if not buffer or len(buffer) % _FLOAT32.itemsize:
        return []
    return np.frombuffer(buffer, dtype=_FLOAT32).tolist()


def decode_legacy(payload: str | Sequence[float] | None) -> list[float] | None:
    """Decode an inline embedding from an older index file.

    Args:
        payload: Base64 text in any of the historical encodings, or a JSON
            number array.

    Returns:
        The vector, or None when the payload is absent or undecodable.
    """
    if payload is None:
        return None

    if not isinstance(payload, str):
        try:
            return np.asarray(payload, dtype=_FLOAT32).tolist()
        except (TypeError, ValueError):
            return None

    if not payload.strip():
        return None

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None

    quantized = _try_quantized(data)
    if quantized is not None:
        return quantized

    inflated = _try_gzip(data)
    if inflated is not None:
        return inflated

    if len(data) % _FLOAT32.itemsize == 0:
        return deserialize_binary(data)
    return None


def _try_quantized(data: bytes) -> list[float] | None:
    if len(data) < _QUANTIZED_HEADER.size:
        return None

    length, scale = _QUANTIZED_HEADER.unpack_from(data)
    if length < 0 or len(data) != _QUANTIZED_HEADER.size + length:
        return None

    if scale <= 0:
        return [0.0] * length

    values = np.frombuffer(data, dtype=np.int8, offset=_QUANTIZED_HEADER.size)
    return (values.astype(_FLOAT32) * np.float32(scale)).tolist()


def _try_gzip(data: bytes) -> list[float] | None:
    try:
        raw = gzip.decompress(data)
    except (OSError, EOFError, zlib.error):
        return None

    # Trailing bytes that do not form a whole float are ignored
    usable = len(raw) - len(raw) % _FLOAT32.itemsize
    if usable == 0:
        return []
    return np.frombuffer(raw[:usable], dtype=_FLOAT32).tolist()
