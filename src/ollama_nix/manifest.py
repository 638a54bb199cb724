"""Registry manifest schema and retrieval.

The manifest is fetched exactly once. Its bytes are hashed while they are
read so that the recipe can pin the very file the registry serves.
"""

from __future__ import annotations

import hashlib
import json
import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional

import httpx

from .errors import DecodeError, NetworkError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Layer:
    """One content-addressed part of a model."""

    digest: str = ""
    media_type: str = ""
    size: int = 0

    @classmethod
    def from_dict(cls, data: Any, where: str = "layer") -> "Layer":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise DecodeError(f"{where} must be an object, got {type(data).__name__}")
        return cls(
            digest=_field(data, "digest", str, "", where),
            media_type=_field(data, "mediaType", str, "", where),
            size=_field(data, "size", int, 0, where),
        )


@dataclass(frozen=True)
class Manifest:
    schema_version: int = 0
    media_type: str = ""
    config: Layer = field(default_factory=Layer)
    layers: List[Layer] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Manifest":
        """Decode a manifest leniently: absent fields keep their zero values."""

        if not isinstance(data, dict):
            raise DecodeError(f"manifest must be an object, got {type(data).__name__}")
        raw_layers = data.get("layers")
        if raw_layers is None:
            raw_layers = []
        if not isinstance(raw_layers, list):
            raise DecodeError("manifest.layers must be an array")
        return cls(
            schema_version=_field(data, "schemaVersion", int, 0, "manifest"),
            media_type=_field(data, "mediaType", str, "", "manifest"),
            config=Layer.from_dict(data.get("config"), "manifest.config"),
            layers=[
                Layer.from_dict(item, f"manifest.layers[{i}]")
                for i, item in enumerate(raw_layers)
            ],
        )


def _field(data: Dict[str, Any], key: str, kind: type, default: Any, where: str) -> Any:
    value = data.get(key)
    if value is None:
        return default
    # bool is an int subclass but never a valid size or schema version
    if isinstance(value, bool) or not isinstance(value, kind):
        raise DecodeError(
            f"{where}.{key} must be {kind.__name__}, got {type(value).__name__}"
        )
    return value


class HashingReader:
    """Collect chunks from a byte stream while feeding them to a sha256."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._chunks: Iterator[bytes] = iter(chunks)
        self._hasher = hashlib.sha256()
        self.bytes_read = 0

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self._chunks:
            self._hasher.update(chunk)
            self.bytes_read += len(chunk)
            yield chunk

    def read(self) -> bytes:
        return b"".join(self)

    def digest(self) -> bytes:
        return self._hasher.digest()

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()


@dataclass(frozen=True)
class FetchedManifest:
    manifest: Manifest
    digest: bytes  # sha256 over the exact response body


class RegistryClient(AbstractContextManager["RegistryClient"]):
    """Minimal unauthenticated client for a model registry's manifest API."""

    def __init__(self, client: Optional[httpx.Client] = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(follow_redirects=True)
        self.requests_made = 0

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch_manifest(self, url: str) -> FetchedManifest:
        """GET ``url`` once and decode the body as a manifest."""

        logger.debug("Downloading manifest from %s", url)
        self.requests_made += 1
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                reader = HashingReader(response.iter_bytes())
                body = reader.read()
        except httpx.HTTPStatusError as exc:
            raise NetworkError(
                f"failed to download manifest: registry answered "
                f"{exc.response.status_code} for {url}"
            ) from exc
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise NetworkError(f"failed to download manifest: {exc}") from exc

        logger.debug("Read %d manifest bytes (sha256 %s)", reader.bytes_read, reader.hexdigest())
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise DecodeError(f"failed to decode manifest: {exc}") from exc
        try:
            manifest = Manifest.from_dict(payload)
        except DecodeError as exc:
            raise DecodeError(f"failed to decode manifest: {exc}") from exc
        logger.info(
            "Manifest schema %d with %d layers", manifest.schema_version, len(manifest.layers)
        )
        return FetchedManifest(manifest=manifest, digest=reader.digest())


__all__ = ["Layer", "Manifest", "FetchedManifest", "HashingReader", "RegistryClient"]
