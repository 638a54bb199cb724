"""Turn Ollama registry manifests into reproducible Nix recipes."""

from .errors import ConfigError, DecodeError, EncodingError, NetworkError, OllamaNixError
from .generator import GeneratorConfig, generate_recipe
from .hashes import to_content_hash
from .manifest import Layer, Manifest, RegistryClient
from .recipe import Recipe, build_recipe, render_recipe
from .reference import ManifestRequest, parse_model_identifier

__version__ = "0.1.0"
__all__ = [
    "ConfigError",
    "DecodeError",
    "EncodingError",
    "NetworkError",
    "OllamaNixError",
    "GeneratorConfig",
    "generate_recipe",
    "to_content_hash",
    "Layer",
    "Manifest",
    "RegistryClient",
    "Recipe",
    "build_recipe",
    "render_recipe",
    "ManifestRequest",
    "parse_model_identifier",
]
