import json
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import httpx
import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

MANIFEST_URL = "https://registry.ollama.ai/v2/library/mistral-nemo/manifests/latest"

LAYER_DIGESTS = [
    "sha256:b559938ab7a0392fc9ea9675b82280f2a15669ec3e0e0fc491c9cb0a7681cf94",
    "sha256:f023d1ce0e55d0dcdeaf70ad81555c2a20822ed607a7abd8de3c3131360f5f0a",
    "sha256:43070e2d4e532684de521b885f385d0841030efa2b1a20bafb76133a5e1379c1",
    "sha256:ed11eda7790d05b49395598a42b155812b17e263214292f7b87d15e14003d337",
]

SAMPLE_MANIFEST = {
    "schemaVersion": 2,
    "mediaType": "application/vnd.docker.distribution.manifest.v2+json",
    "config": {
        "digest": "sha256:65d37de20e5951c7434ad4230c51a4d5be99b8cb7407d2135074d82c40b44b45",
        "mediaType": "application/vnd.docker.container.image.v1+json",
        "size": 486,
    },
    "layers": [
        {
            "digest": LAYER_DIGESTS[0],
            "mediaType": "application/vnd.ollama.image.model",
            "size": 7071700672,
        },
        {
            "digest": LAYER_DIGESTS[1],
            "mediaType": "application/vnd.ollama.image.template",
            "size": 688,
        },
        {
            "digest": LAYER_DIGESTS[2],
            "mediaType": "application/vnd.ollama.image.license",
            "size": 11356,
        },
        {
            "digest": LAYER_DIGESTS[3],
            "mediaType": "application/vnd.ollama.image.params",
            "size": 30,
        },
    ],
}


class FakeRegistry:
    """Serve canned responses through ``httpx.MockTransport`` and record calls."""

    def __init__(self) -> None:
        self.routes: Dict[str, Tuple[int, bytes, Dict[str, str]]] = {}
        self.calls: List[str] = []
        self.error: Optional[Exception] = None

    def add(
        self,
        url: str,
        body: bytes = b"",
        status: int = 200,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.routes[url] = (status, body, headers or {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(str(request.url))
        if self.error is not None:
            raise self.error
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, content=b'{"errors":[{"code":"NOT_FOUND"}]}')
        status, body, headers = route
        return httpx.Response(status, content=body, headers=headers)

    def client(self) -> httpx.Client:
        return httpx.Client(
            transport=httpx.MockTransport(self.handler), follow_redirects=True
        )


@pytest.fixture
def sample_manifest_bytes() -> bytes:
    return json.dumps(SAMPLE_MANIFEST, indent=1).encode("utf-8")


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()
