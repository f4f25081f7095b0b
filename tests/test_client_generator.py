"""Tests for the client request / cache / debounce flow."""
import asyncio
import json
import uuid
from typing import Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from app.client.api import ProjectsClient
from app.client.cache import SectionCache
from app.client.generator import EMPTY_IDEA_MESSAGE, GeneratorState, WebsiteGenerator
from app.dependencies.store import get_project_store
from app.main import app
from app.services.project_store import InMemoryProjectStore
from app.services.sections import derive_sections

DEBOUNCE = 0.02


def server_sections(idea: str) -> List[str]:
    return [f"Server: {s}" for s in derive_sections(idea)]


class FakeServer:
    """MockTransport handler speaking the projects API envelope."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []
        self.projects: Dict[str, dict] = {}
        self.fail_with: Optional[str] = None
        self.gates: Dict[str, asyncio.Event] = {}

    @property
    def posted_ideas(self) -> List[str]:
        return [p["websiteIdea"] for p in self.projects.values()]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path))
        if self.fail_with:
            return httpx.Response(200, json={"success": False, "error": self.fail_with})

        if request.method == "POST":
            idea = json.loads(request.content)["websiteIdea"]
            gate = self.gates.get(idea)
            if gate is not None:
                await gate.wait()
            project = {
                "_id": uuid.uuid4().hex,
                "websiteIdea": idea,
                "sections": server_sections(idea),
                "createdAt": "2024-01-01T00:00:00Z",
            }
            self.projects[project["_id"]] = project
            return httpx.Response(200, json={"success": True, "data": project})

        project_id = request.url.path.rsplit("/", 1)[-1]
        return httpx.Response(200, json={"success": True, "data": self.projects[project_id]})


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def renders():
    return []


@pytest_asyncio.fixture
async def generator(server: FakeServer, renders: List[GeneratorState]):
    api = ProjectsClient(base_url="http://test", transport=httpx.MockTransport(server))
    gen = WebsiteGenerator(api, debounce_seconds=DEBOUNCE, on_render=renders.append)
    yield gen
    await gen.aclose()
    await api.aclose()


# ---------------------------------------------------------------------------
# Debounce
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["bak", "bake", "  bake  "])
async def test_short_input_makes_no_request(generator, server, renders, text):
    generator.on_input(text)
    await asyncio.sleep(DEBOUNCE * 3)
    await generator.wait_idle()

    assert server.calls == []
    assert all(not r.sections for r in renders)


@pytest.mark.asyncio
async def test_long_input_renders_optimistic_then_authoritative(generator, server, renders):
    generator.on_input("baker")
    # nothing happens before the debounce fires
    assert all(not r.sections for r in renders)

    await generator.wait_idle()

    with_sections = [r for r in renders if r.sections]
    assert len(with_sections) == 2
    optimistic, final = with_sections
    assert optimistic.is_optimistic and optimistic.is_generating
    assert optimistic.sections == derive_sections("baker")
    assert not final.is_optimistic and not final.is_generating
    assert final.sections == server_sections("baker")

    project_id = next(iter(server.projects))
    assert server.calls == [("POST", "/api/projects"), ("GET", f"/api/projects/{project_id}")]


@pytest.mark.asyncio
async def test_rapid_typing_only_looks_up_latest_text(generator, server):
    for text in ("bakery d", "bakery do", "bakery dow", "bakery down"):
        generator.on_input(text)
    await generator.wait_idle()

    assert server.posted_ideas == ["bakery down"]
    assert generator.state.sections == server_sections("bakery down")


@pytest.mark.asyncio
async def test_short_input_cancels_pending_timer_and_clears(generator, server):
    await generator.lookup("A bakery downtown")
    assert generator.state.sections

    generator.on_input("restaurant row")
    generator.on_input("re")
    await asyncio.sleep(DEBOUNCE * 3)
    await generator.wait_idle()

    assert server.posted_ideas == ["A bakery downtown"]
    assert generator.state.sections == []
    assert generator.state.error is None


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_same_idea_twice_hits_network_once(generator, server, renders):
    await generator.lookup("My Bakery")
    assert len(server.calls) == 2

    renders.clear()
    generator.on_input("  my bakery ")
    await generator.wait_idle()

    assert len(server.calls) == 2
    assert len(renders) == 1
    assert not renders[0].is_optimistic
    assert renders[0].sections == server_sections("My Bakery")


@pytest.mark.asyncio
async def test_expired_cache_entry_goes_back_to_network(server):
    now = [0.0]
    cache = SectionCache(ttl_seconds=300, clock=lambda: now[0])
    async with ProjectsClient(base_url="http://test", transport=httpx.MockTransport(server)) as api:
        gen = WebsiteGenerator(api, cache=cache, debounce_seconds=DEBOUNCE)
        await gen.lookup("online store")
        now[0] += 301
        await gen.lookup("online store")
        await gen.aclose()

    assert server.posted_ideas == ["online store", "online store"]


# ---------------------------------------------------------------------------
# Single flight
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_newer_request_cancels_stale_one(generator, server, renders):
    gate = asyncio.Event()
    server.gates["slow bakery"] = gate

    first = asyncio.create_task(generator.lookup("slow bakery"))
    await asyncio.sleep(DEBOUNCE)
    assert server.calls == [("POST", "/api/projects")]

    await generator.lookup("fast restaurant")
    gate.set()
    await first
    await asyncio.sleep(DEBOUNCE)

    assert generator.state.sections == server_sections("fast restaurant")
    assert generator.state.error is None
    assert not any(r.sections == server_sections("slow bakery") for r in renders)
    assert generator.cache.get("slow bakery") is None


@pytest.mark.asyncio
async def test_debounced_input_supersedes_in_flight_request(generator, server):
    server.gates["portfolio one"] = asyncio.Event()

    generator.on_input("portfolio one")
    await asyncio.sleep(DEBOUNCE * 3)
    assert generator.state.is_generating

    generator.on_input("portfolio two")
    await generator.wait_idle()

    assert generator.state.sections == server_sections("portfolio two")
    assert not generator.state.is_generating


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_api_failure_keeps_optimistic_sections(generator, server):
    server.fail_with = "Database unavailable"

    await generator.lookup("A bakery")

    assert generator.state.error == "Database unavailable"
    assert generator.state.sections == derive_sections("A bakery")
    assert generator.state.is_optimistic
    assert not generator.state.is_generating
    assert generator.cache.get("A bakery") is None


@pytest.mark.asyncio
async def test_failure_is_not_retried(generator, server):
    server.fail_with = "boom"
    await generator.lookup("A bakery")
    assert server.calls == [("POST", "/api/projects")]


@pytest.mark.asyncio
async def test_network_error_is_shown():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with ProjectsClient(base_url="http://test", transport=httpx.MockTransport(refuse)) as api:
        gen = WebsiteGenerator(api, debounce_seconds=DEBOUNCE)
        await gen.lookup("A restaurant")

    assert gen.state.error.startswith("Could not reach the server")
    assert gen.state.sections == derive_sections("A restaurant")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc",
    [httpx.InvalidURL("bad host"), httpx.StreamClosed()],
    ids=["invalid-url", "stream-closed"],
)
async def test_non_http_transport_errors_are_network_errors(exc):
    def fail(request: httpx.Request) -> httpx.Response:
        raise exc

    async with ProjectsClient(base_url="http://test", transport=httpx.MockTransport(fail)) as api:
        gen = WebsiteGenerator(api, debounce_seconds=DEBOUNCE)
        await gen.lookup("A restaurant")

    assert gen.state.error.startswith("Could not reach the server")
    assert not gen.state.is_generating


@pytest.mark.asyncio
async def test_unexpected_error_stops_generating():
    def crash(request: httpx.Request) -> httpx.Response:
        raise RuntimeError("boom")

    renders: List[GeneratorState] = []
    async with ProjectsClient(base_url="http://test", transport=httpx.MockTransport(crash)) as api:
        gen = WebsiteGenerator(api, debounce_seconds=DEBOUNCE, on_render=renders.append)
        await gen.lookup("A bakery")

    assert gen.state.error == "boom"
    assert not gen.state.is_generating
    assert gen.state.sections == derive_sections("A bakery")
    assert gen.cache.get("A bakery") is None
    assert not renders[-1].is_generating


# ---------------------------------------------------------------------------
# Manual submit
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_submit_bypasses_debounce_and_clears_input(generator, server):
    generator.on_input("A restaurant")
    await generator.submit()

    assert generator.state.idea == ""
    assert generator.state.sections == server_sections("A restaurant")
    assert len(server.calls) == 2


@pytest.mark.asyncio
async def test_submit_clears_input_on_failure(generator, server):
    server.fail_with = "boom"
    generator.on_input("A restaurant")
    await generator.submit()

    assert generator.state.idea == ""
    assert generator.state.error == "boom"


@pytest.mark.asyncio
async def test_submit_short_idea_still_looks_up(generator, server):
    generator.on_input("shop")
    await generator.submit()
    assert server.posted_ideas == ["shop"]


@pytest.mark.asyncio
async def test_submit_empty_input_shows_error(generator, server):
    generator.on_input("   ")
    await generator.submit()

    assert generator.state.error == EMPTY_IDEA_MESSAGE
    assert server.calls == []


@pytest.mark.asyncio
async def test_submit_uses_cache(generator, server):
    await generator.lookup("A restaurant")
    generator.on_input("a restaurant")
    await generator.submit()
    assert len(server.calls) == 2


# ---------------------------------------------------------------------------
# Against the real API
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_generator_against_api():
    store = InMemoryProjectStore()
    app.dependency_overrides[get_project_store] = lambda: store
    try:
        transport = httpx.ASGITransport(app=app)
        async with ProjectsClient(base_url="http://test", transport=transport) as api:
            gen = WebsiteGenerator(api, debounce_seconds=DEBOUNCE)
            gen.on_input("My design portfolio")
            await gen.wait_idle()

            assert gen.state.error is None
            assert gen.state.sections == derive_sections("My design portfolio")
            assert not gen.state.is_optimistic

            listed = await api.list_projects()
            assert [p.website_idea for p in listed] == ["My design portfolio"]
    finally:
        app.dependency_overrides.clear()
