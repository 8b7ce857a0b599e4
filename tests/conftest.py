# Test fixtures and configuration
import json
import pytest
import sys
from pathlib import Path

import httpx

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from layered_vton.config import (  # noqa: E402
    CacheConfig,
    FashnConfig,
    LayeringConfig,
    PipelineConfig,
    PollingConfig,
)
from layered_vton.models import Garment  # noqa: E402
from layered_vton.services import FashnClient, MemoryStore, ResultCache  # noqa: E402


BASE_URL = "https://fashn.test"


class FakeTransformAPI:
    """In-process stand-in for the remote run/status endpoints.

    Every job completes immediately with an output URL that records the chain
    of inputs, e.g. ``avatar.png+shirt.png`` for a shirt applied to the avatar.
    Garment images listed in ``failing`` produce a ``failed`` job instead.
    """

    def __init__(self, failing: set[str] | None = None):
        self.failing = failing or set()
        self.submissions: list[dict] = []
        self.status_calls = 0
        self._jobs: dict[str, dict] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "POST" and path == "/v1/run":
            body = json.loads(request.content)
            job_id = f"job-{len(self.submissions) + 1}"
            self.submissions.append(body)
            self._jobs[job_id] = body["inputs"]
            return httpx.Response(200, json={"id": job_id})

        if request.method == "GET" and path.startswith("/v1/status/"):
            self.status_calls += 1
            job_id = path.rsplit("/", 1)[-1]
            inputs = self._jobs[job_id]
            garment = inputs["garment_image"]
            if garment in self.failing:
                return httpx.Response(200, json={
                    "id": job_id,
                    "status": "failed",
                    "error": f"Unable to detect clothing in {garment}",
                })
            name = garment.rsplit("/", 1)[-1]
            return httpx.Response(200, json={
                "id": job_id,
                "status": "completed",
                "output": [f"{inputs['model_image']}+{name}"],
            })

        return httpx.Response(404)

    @property
    def submitted_garments(self) -> list[str]:
        return [s["inputs"]["garment_image"] for s in self.submissions]


class ScriptedStatusAPI:
    """Returns scripted status payloads one per call; the last one repeats.

    Script entries may be dicts (JSON body), ``httpx.Response`` objects, or
    exceptions to raise from the transport.
    """

    def __init__(self, script: list, job_id: str = "job-1"):
        self.script = list(script)
        self.job_id = job_id
        self.status_calls = 0
        self.submit_calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self.submit_calls += 1
            return httpx.Response(200, json={"id": self.job_id})

        index = min(self.status_calls, len(self.script) - 1)
        self.status_calls += 1
        entry = self.script[index]
        if isinstance(entry, Exception):
            raise entry
        if isinstance(entry, httpx.Response):
            return entry
        return httpx.Response(200, json=entry)


@pytest.fixture
def pipeline_config(tmp_path):
    """Config with zero delays so tests never sleep."""
    return PipelineConfig(
        fashn=FashnConfig(base_url=BASE_URL, api_key="test-key"),
        polling=PollingConfig(
            max_attempts=5,
            poll_interval=0,
            retry_backoff=0,
            max_backoff=0,
            overall_timeout=30,
            submit_retries=1,
        ),
        layering=LayeringConfig(layer_delay=0),
        cache=CacheConfig(path=tmp_path / "cache.json"),
    )


@pytest.fixture
def fake_api():
    return FakeTransformAPI()


@pytest.fixture
def make_client(pipeline_config):
    """Build a FashnClient whose HTTP calls go to the given handler."""
    def _make(handler, polling: PollingConfig | None = None) -> FashnClient:
        return FashnClient(
            pipeline_config.fashn,
            polling or pipeline_config.polling,
            transport=httpx.MockTransport(handler),
        )
    return _make


@pytest.fixture
def memory_cache():
    return ResultCache(MemoryStore())


@pytest.fixture
def wardrobe():
    """Sample wardrobe items keyed by a short name."""
    return {
        "tank": Garment(id="g-tank", name="White Tank", image_url="https://cdn.test/tank.png",
                        category="shirts", clothing_type="undershirt"),
        "shirt": Garment(id="g-shirt", name="Oxford Shirt", image_url="https://cdn.test/shirt.png",
                         category="shirts", clothing_type="shirt"),
        "jeans": Garment(id="g-jeans", name="Slim Jeans", image_url="https://cdn.test/jeans.png",
                         category="pants", clothing_type="jeans"),
        "jacket": Garment(id="g-jacket", name="Denim Jacket", image_url="https://cdn.test/jacket.png",
                          category="shirts", clothing_type="jacket"),
        "necklace": Garment(id="g-necklace", name="Gold Chain", image_url="https://cdn.test/necklace.png",
                            category="accessories", clothing_type="necklace"),
        "hat": Garment(id="g-hat", name="Bucket Hat", image_url="https://cdn.test/hat.png",
                       category="accessories", clothing_type="hat"),
        "boots": Garment(id="g-boots", name="Chelsea Boots", image_url="https://cdn.test/boots.png",
                         category="shoes", clothing_type="boots"),
    }
