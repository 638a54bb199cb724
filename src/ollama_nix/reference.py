"""Model identifier parsing and registry URL construction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
from urllib.parse import quote

DEFAULT_REGISTRY = "registry.ollama.ai"
DEFAULT_VERSION = "latest"
SCHEME = "https"

# Characters a URL path segment may carry unescaped besides the unreserved set.
_SEGMENT_SAFE = "$&+:=@"


def parse_model_identifier(identifier: str) -> Tuple[str, str]:
    """Split ``name[:version]`` at the first colon.

    Never fails; an empty name is rejected later by config validation.
    """

    name, sep, version = identifier.partition(":")
    if not sep:
        version = DEFAULT_VERSION
    return name, version


def escape_segment(segment: str) -> str:
    return quote(segment, safe=_SEGMENT_SAFE)


@dataclass(frozen=True)
class ManifestRequest:
    """A resolved manifest lookup: which registry, model and version."""

    registry: str
    model: str
    version: str = DEFAULT_VERSION

    @classmethod
    def from_identifier(cls, registry: str, identifier: str) -> "ManifestRequest":
        name, version = parse_model_identifier(identifier)
        return cls(registry=registry, model=name, version=version)

    @property
    def base_url(self) -> str:
        return f"{SCHEME}://{self.registry}"

    @property
    def manifest_url(self) -> str:
        return (
            f"{self.base_url}/v2/library/{escape_segment(self.model)}"
            f"/manifests/{escape_segment(self.version)}"
        )

    def blob_url(self, digest: str) -> str:
        return (
            f"{self.base_url}/v2/library/{escape_segment(self.model)}"
            f"/blobs/{escape_segment(digest)}"
        )

    @property
    def manifest_dir(self) -> str:
        """Directory holding the manifest pointer inside the generated tree."""
        return f"manifests/{self.registry}/{self.model}"


__all__ = [
    "DEFAULT_REGISTRY",
    "DEFAULT_VERSION",
    "ManifestRequest",
    "escape_segment",
    "parse_model_identifier",
]
