"""Conversion between registry digests and Nix SRI content hashes.

Registries identify blobs as ``sha256:<hex>`` while ``pkgs.fetchurl`` expects
``sha256-<base64>``. Both carry the same 32 raw bytes.
"""

from __future__ import annotations

import base64
import binascii

from .errors import EncodingError

DIGEST_PREFIX = "sha256:"
CONTENT_HASH_PREFIX = "sha256-"
DIGEST_SIZE = 32


def _strip_prefix(digest: str) -> str:
    if digest.startswith(DIGEST_PREFIX):
        return digest[len(DIGEST_PREFIX) :]
    return digest


def encode_content_hash(raw: bytes) -> str:
    """Encode raw sha256 bytes as a ``sha256-<base64>`` content hash."""

    return CONTENT_HASH_PREFIX + base64.b64encode(raw).decode("ascii")


def to_content_hash(digest: str) -> str:
    """Transcode a ``sha256:<hex>`` digest into a ``sha256-<base64>`` hash.

    The ``sha256:`` prefix is optional; any other prefix is treated as part of
    the hex payload and fails to decode.
    """

    payload = _strip_prefix(digest)
    try:
        raw = binascii.unhexlify(payload.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise EncodingError(f"invalid hex digest {digest!r}: {exc}") from exc
    if len(raw) != DIGEST_SIZE:
        raise EncodingError(
            f"invalid hex digest {digest!r}: expected {DIGEST_SIZE} bytes, got {len(raw)}"
        )
    return encode_content_hash(raw)


def blob_file_name(digest: str) -> str:
    """File name of a blob in an Ollama model store, ``sha256-<hex>``."""

    return CONTENT_HASH_PREFIX + _strip_prefix(digest).lower()


__all__ = [
    "blob_file_name",
    "encode_content_hash",
    "to_content_hash",
    "DIGEST_PREFIX",
    "CONTENT_HASH_PREFIX",
]
