"""Nix recipe model and rendering.

``build_recipe`` turns a fetched manifest into an ordered list of fetch
declarations; ``render_recipe`` formats that list as a Nix expression in one
pass. The generated derivation lays files out like an Ollama model store::

    $out/blobs/sha256-<hex>
    $out/manifests/<registry>/<model>/<version>
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import EncodingError
from .hashes import blob_file_name, encode_content_hash, to_content_hash
from .manifest import Manifest
from .reference import ManifestRequest

logger = logging.getLogger(__name__)

MANIFEST_SYMBOL = "manifestFile"
DERIVATION_NAME = "models"
CURL_OPTIONS = ("-L", "-H", "Accept:application/octet-stream")


@dataclass(frozen=True)
class FetchDeclaration:
    """One ``pkgs.fetchurl`` binding."""

    symbol: str
    url: str
    content_hash: str
    file_name: Optional[str] = None


@dataclass(frozen=True)
class Recipe:
    request: ManifestRequest
    blobs: Tuple[FetchDeclaration, ...]
    manifest: FetchDeclaration
    name: str = DERIVATION_NAME

    @property
    def declarations(self) -> List[FetchDeclaration]:
        return [*self.blobs, self.manifest]

    @property
    def symbols(self) -> List[str]:
        return [decl.symbol for decl in self.declarations]


def build_recipe(
    request: ManifestRequest, manifest: Manifest, manifest_digest: bytes
) -> Recipe:
    """Collect the fetch declarations for every layer plus the manifest."""

    blobs: List[FetchDeclaration] = []
    for index, layer in enumerate(manifest.layers):
        try:
            content_hash = to_content_hash(layer.digest)
        except EncodingError as exc:
            raise EncodingError(f"failed to convert blob hash: {exc}") from exc
        blobs.append(
            FetchDeclaration(
                symbol=f"blob_{index}",
                url=request.blob_url(layer.digest),
                content_hash=content_hash,
                file_name=blob_file_name(layer.digest),
            )
        )
        logger.debug("blob_%d %s -> %s", index, layer.digest, content_hash)

    manifest_decl = FetchDeclaration(
        symbol=MANIFEST_SYMBOL,
        url=request.manifest_url,
        content_hash=encode_content_hash(manifest_digest),
    )
    return Recipe(request=request, blobs=tuple(blobs), manifest=manifest_decl)


def nix_string(value: str) -> str:
    """Quote ``value`` as a double-quoted Nix string literal."""

    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("${", "\\${")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _indented(value: str) -> str:
    # escapes for text placed inside a Nix ''...'' string
    return value.replace("''", "'''").replace("${", "''${")


def _out_path(relative: str) -> str:
    return "$out/" + _indented(shlex.quote(relative))


def _render_fetch(decl: FetchDeclaration) -> List[str]:
    curl_opts = " ".join(nix_string(opt) for opt in CURL_OPTIONS)
    lines = [f"  {decl.symbol} = pkgs.fetchurl {{"]
    if decl.file_name:
        lines.append(f"    name = {nix_string(decl.file_name)};")
    lines += [
        f"    curlOptsList = [{curl_opts}];",
        f"    url = {nix_string(decl.url)};",
        f"    hash = {nix_string(decl.content_hash)};",
        "  };",
    ]
    return lines


def render_recipe(recipe: Recipe) -> str:
    request = recipe.request
    manifest_dir = request.manifest_dir

    lines = ["{ pkgs ? import <nixpkgs> {} }:", "", "let"]
    lines.append("  # List of blob files with URLs and corresponding hashes.")
    for decl in recipe.blobs:
        lines += _render_fetch(decl)
    lines += ["", "  # Fetch the manifest file."]
    lines += _render_fetch(recipe.manifest)
    lines += [
        "in",
        "  # Use symlinkJoin to create the final symlinked structure.",
        "  pkgs.symlinkJoin {",
        f"    name = {nix_string(recipe.name)};",
        "",
        "    # Paths from both blobs and the manifest file.",
        "    paths = [",
    ]
    lines += [f"      {symbol}" for symbol in recipe.symbols]
    lines += [
        "    ];",
        "",
        "    # Add a postBuild step to arrange the structure.",
        "    postBuild = ''",
        "      # Link blob files into the blobs directory.",
        "      mkdir -p $out/blobs",
    ]
    for decl in recipe.blobs:
        lines.append(
            f"      ln -s ${{{decl.symbol}}} {_out_path('blobs/' + (decl.file_name or ''))}"
        )
    lines += [
        "",
        "      # Link the manifest file into the manifests directory.",
        f"      mkdir -p {_out_path(manifest_dir)}",
        f"      ln -s ${{{recipe.manifest.symbol}}} "
        f"{_out_path(manifest_dir + '/' + request.version)}",
        "    '';",
        "  }",
    ]
    return "\n".join(lines) + "\n"


__all__ = [
    "FetchDeclaration",
    "Recipe",
    "build_recipe",
    "nix_string",
    "render_recipe",
    "MANIFEST_SYMBOL",
]
