import hashlib

import pytest

from conftest import MANIFEST_URL
from ollama_nix.errors import ConfigError, DecodeError, EncodingError
from ollama_nix.generator import GeneratorConfig, generate, generate_recipe
from ollama_nix.manifest import RegistryClient


@pytest.mark.parametrize(
    "model, registry",
    [("", "registry.ollama.ai"), (":7b", "registry.ollama.ai"), ("mistral-nemo", "")],
)
def test_invalid_config_is_rejected(model, registry):
    with pytest.raises(ConfigError):
        GeneratorConfig(model=model, registry=registry).validate()


def test_config_defaults():
    config = GeneratorConfig(model="mistral-nemo").validate()
    assert config.registry == "registry.ollama.ai"
    assert config.request().manifest_url == MANIFEST_URL


def test_missing_model_makes_no_request(fake_registry):
    client = RegistryClient(client=fake_registry.client())
    with pytest.raises(ConfigError, match="model is required"):
        generate(GeneratorConfig(model=""), client)
    assert fake_registry.calls == []
    assert client.requests_made == 0


def test_generate_end_to_end(fake_registry, sample_manifest_bytes):
    fake_registry.add(MANIFEST_URL, sample_manifest_bytes)
    client = RegistryClient(client=fake_registry.client())

    result = generate(GeneratorConfig(model="mistral-nemo:latest"), client)

    assert result.fetched.digest == hashlib.sha256(sample_manifest_bytes).digest()
    assert len(result.recipe.blobs) == 4
    assert result.text.endswith("  }\n")
    assert "mkdir -p $out/manifests/registry.ollama.ai/mistral-nemo\n" in result.text


def test_generate_recipe_uses_requested_model(fake_registry, sample_manifest_bytes):
    url = "https://registry.ollama.ai/v2/library/llama3.2/manifests/1b"
    fake_registry.add(url, sample_manifest_bytes)
    client = RegistryClient(client=fake_registry.client())

    text = generate_recipe(GeneratorConfig(model="llama3.2:1b"), client)

    assert "/v2/library/llama3.2/blobs/sha256:" in text
    assert "mistral-nemo" not in text
    assert "$out/manifests/registry.ollama.ai/llama3.2/1b\n" in text


def test_decode_failure_propagates(fake_registry):
    fake_registry.add(MANIFEST_URL, b"<html>not json</html>")
    with pytest.raises(DecodeError):
        generate_recipe(
            GeneratorConfig(model="mistral-nemo"), RegistryClient(client=fake_registry.client())
        )


def test_bad_layer_digest_propagates(fake_registry):
    fake_registry.add(MANIFEST_URL, b'{"layers": [{"digest": "sha256:zz"}]}')
    with pytest.raises(EncodingError, match="failed to convert blob hash"):
        generate_recipe(
            GeneratorConfig(model="mistral-nemo"), RegistryClient(client=fake_registry.client())
        )
