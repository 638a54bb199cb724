"""End-to-end recipe generation: resolve, fetch, transcode, render."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigError
from .manifest import FetchedManifest, RegistryClient
from .recipe import Recipe, build_recipe, render_recipe
from .reference import DEFAULT_REGISTRY, ManifestRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratorConfig:
    """Settings for one run, built once from the command line."""

    model: str
    registry: str = DEFAULT_REGISTRY
    output: Optional[Path] = None

    def validate(self) -> "GeneratorConfig":
        if not self.registry:
            raise ConfigError("registry is required")
        if not self.model:
            raise ConfigError("model is required")
        if not self.request().model:
            raise ConfigError(f"model name is empty in {self.model!r}")
        return self

    def request(self) -> ManifestRequest:
        return ManifestRequest.from_identifier(self.registry, self.model)


@dataclass(frozen=True)
class GenerationResult:
    fetched: FetchedManifest
    recipe: Recipe
    text: str


def generate(config: GeneratorConfig, client: RegistryClient) -> GenerationResult:
    """Run the full pipeline. Nothing is emitted unless every stage succeeds."""

    config.validate()
    request = config.request()
    logger.info(
        "Generating recipe for %s:%s from %s", request.model, request.version, request.registry
    )
    fetched = client.fetch_manifest(request.manifest_url)
    recipe = build_recipe(request, fetched.manifest, fetched.digest)
    text = render_recipe(recipe)
    logger.info("Rendered %d fetch declarations", len(recipe.declarations))
    return GenerationResult(fetched=fetched, recipe=recipe, text=text)


def generate_recipe(config: GeneratorConfig, client: RegistryClient) -> str:
    return generate(config, client).text


__all__ = ["GeneratorConfig", "GenerationResult", "generate", "generate_recipe"]
