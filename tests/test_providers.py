import asyncio
import logging

import httpx
import pytest

from config.config import Secrets, SearchSource
from websearch.contracts import RawHit
from websearch.providers.extras import ExtrasProvider, parse_extras_payload
from websearch.providers.koboldcpp import KoboldCppProvider, parse_koboldcpp_payload
from websearch.providers.registry import ProviderRegistry, create_default_registry
from websearch.providers.searxng import SearXNGProvider, parse_searxng_payload
from websearch.providers.serpapi import SerpApiProvider, parse_answer_box, parse_serpapi_payload
from websearch.providers.serper import SerperProvider, parse_serper_payload
from websearch.providers.tavily_client import TavilyProvider, parse_tavily_payload

pytestmark = pytest.mark.unit


def run_with_transport(handler, coro_factory):
    """Run coro_factory(http) against an httpx client backed by handler."""

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            return await coro_factory(http)

    return asyncio.run(_run())


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------


def test_serpapi_orders_answer_box_graph_then_interleaved_results():
    data = {
        "answer_box": {"type": "calculator_result", "result": "42"},
        "knowledge_graph": {"description": "A number."},
        "organic_results": [
            {"snippet": f"organic {i}", "link": f"https://o{i}.example"} for i in range(12)
        ],
        "related_questions": [
            {"question": f"q{i}?", "snippet": f"answer {i}"} for i in range(12)
        ],
    }

    hit = parse_serpapi_payload(data)

    assert hit.text_bits[:5] == ["Answer: 42", "A number.", "organic 0", "q0? answer 0", "organic 1"]
    assert len(hit.text_bits) == 2 + 10 + 10
    assert hit.links == [f"https://o{i}.example" for i in range(10)]
    assert hit.images == []


def test_serpapi_missing_sections_give_empty_hit():
    hit = parse_serpapi_payload({})
    assert hit.text_bits == []
    assert hit.links == []


def test_serpapi_images_only_when_requested():
    data = {"inline_images": [{"original": "https://img.example/1.jpg"}, {"thumbnail": "https://img.example/2.jpg"}]}
    assert parse_serpapi_payload(data).images == []
    assert parse_serpapi_payload(data, include_images=True).images == [
        "https://img.example/1.jpg",
        "https://img.example/2.jpg",
    ]


@pytest.mark.parametrize(
    "box, expected",
    [
        ({"type": "translation_result", "translation": {"target": {"text": "hola"}}}, ["hola"]),
        ({"type": "population_result", "place": "France", "population": "68 million"}, ["France 68 million"]),
        (
            {"type": "weather_result", "location": "Paris", "weather": "Sunny", "temperature": "20", "unit": "C"},
            ["Paris; Sunny; 20 C"],
        ),
        ({"type": "dictionary_results", "definitions": ["first", "second"]}, ["first\nsecond"]),
        ({"type": "organic_result", "snippet": "Snippet", "list": ["a", "b"]}, ["Snippet", "a\nb"]),
        ({"type": "unknown", "answer": "fallback"}, ["fallback"]),
    ],
)
def test_serpapi_answer_box_types(box, expected):
    assert parse_answer_box(box) == expected


def test_serper_payload():
    data = {
        "answerBox": {"answer": "Rome"},
        "knowledgeGraph": {"description": "Capital of Italy."},
        "organic": [
            {"snippet": "Rome is old.", "link": "https://rome.example"},
            {"snippet": "Rome has seven hills.", "link": "https://hills.example"},
            {"snippet": "Rome hosts the Vatican.", "link": "https://vatican.example"},
        ],
        "peopleAlsoAsk": [
            {"question": "Is Rome big?", "snippet": "Yes."},
            {"question": "Is Rome sunny?", "snippet": "Mostly."},
        ],
    }
    hit = parse_serper_payload(data)
    assert hit.text_bits == [
        "Rome",
        "Capital of Italy.",
        "Rome is old.",
        "Is Rome big? Yes.",
        "Rome has seven hills.",
        "Is Rome sunny? Mostly.",
        "Rome hosts the Vatican.",
    ]
    assert hit.links == ["https://rome.example", "https://hills.example", "https://vatican.example"]


def test_tavily_payload_accepts_string_and_dict_images():
    response = {
        "answer": "Answer text.",
        "results": [{"content": "Source content.", "url": "https://t.example"}],
        "images": ["https://img.example/a.png", {"url": "https://img.example/b.png", "description": "b"}],
    }
    hit = parse_tavily_payload(response)
    assert hit.text_bits == ["Answer text.", "Source content."]
    assert hit.links == ["https://t.example"]
    assert hit.images == ["https://img.example/a.png", "https://img.example/b.png"]


def test_searxng_payload():
    data = {
        "answers": ["42"],
        "infoboxes": [{"content": "Infobox content."}],
        "results": [{"content": "Result content.", "url": "https://s.example"}],
    }
    hit = parse_searxng_payload(data)
    assert hit.text_bits == ["42", "Infobox content.", "Result content."]
    assert hit.links == ["https://s.example"]


def test_extras_payload_splits_lines():
    data = {"results": "line one\n\nline two", "links": ["https://e.example"], "images": ["https://i.example"]}
    hit = parse_extras_payload(data)
    assert hit.text_bits == ["line one", "line two"]
    assert hit.links == ["https://e.example"]
    assert hit.images == []
    assert parse_extras_payload(data, include_images=True).images == ["https://i.example"]


def test_koboldcpp_payload_prefers_desc():
    data = [{"desc": "Short.", "content": "Long.", "url": "https://k.example"}, {"content": "Only content."}]
    hit = parse_koboldcpp_payload(data)
    assert hit.text_bits == ["Short.", "Only content."]
    assert hit.links == ["https://k.example"]
    assert parse_koboldcpp_payload({"unexpected": True}).text_bits == []


# ---------------------------------------------------------------------------
# Adapters over HTTP
# ---------------------------------------------------------------------------


def test_serpapi_provider_sends_query_and_key(make_settings):
    captured = []

    def handler(request):
        captured.append(request)
        return httpx.Response(200, json={"organic_results": [{"snippet": "Hit.", "link": "https://x.example"}]})

    provider_secrets = Secrets(serpapi_api_key="serp-key")
    hit = run_with_transport(
        handler,
        lambda http: SerpApiProvider(make_settings(), provider_secrets, http).search("current pope"),
    )

    assert hit.text_bits == ["Hit."]
    params = captured[0].url.params
    assert params["q"] == "current pope"
    assert params["api_key"] == "serp-key"
    assert params["engine"] == "google"


def test_serpapi_available_only_with_key(make_settings):
    settings = make_settings()
    assert asyncio.run(SerpApiProvider(settings, Secrets(), None).is_available()) is False
    assert asyncio.run(SerpApiProvider(settings, Secrets(serpapi_api_key="k"), None).is_available())


def test_serper_provider_posts_with_api_key_header_and_fetches_images(make_settings):
    captured = []

    def handler(request):
        captured.append(request)
        if request.url.path == "/images":
            return httpx.Response(200, json={"images": [{"imageUrl": "https://img.example/1.png"}]})
        return httpx.Response(200, json={"organic": [{"snippet": "Hit.", "link": "https://x.example"}]})

    settings = make_settings(source="serper", include_images=True)
    hit = run_with_transport(
        handler,
        lambda http: SerperProvider(settings, Secrets(serper_api_key="serper-key"), http).search("q"),
    )

    assert captured[0].headers["x-api-key"] == "serper-key"
    assert [r.url.path for r in captured] == ["/search", "/images"]
    assert hit.images == ["https://img.example/1.png"]


def test_searxng_provider_uses_configured_instance(make_settings):
    captured = []

    def handler(request):
        captured.append(request)
        return httpx.Response(200, json={"results": [{"content": "Result.", "url": "https://r.example"}]})

    settings = make_settings(source="searxng", searxng_url="http://searx.local/")
    hit = run_with_transport(
        handler, lambda http: SearXNGProvider(settings, Secrets(), http).search("q")
    )

    assert str(captured[0].url).startswith("http://searx.local/search")
    assert captured[0].url.params["format"] == "json"
    assert hit.links == ["https://r.example"]


def test_extras_availability_probes_modules(make_settings):
    settings = make_settings(source="extras")

    def loaded(request):
        return httpx.Response(200, json={"modules": ["caption", "websearch"]})

    def missing(request):
        return httpx.Response(200, json={"modules": ["caption"]})

    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    for handler, expected in ((loaded, True), (missing, False), (unreachable, False)):
        available = run_with_transport(
            handler, lambda http: ExtrasProvider(settings, Secrets(), http).is_available()
        )
        assert available is expected


def test_koboldcpp_provider_posts_query(make_settings):
    captured = []

    def handler(request):
        captured.append(request)
        return httpx.Response(200, json=[{"desc": "Kobold hit.", "url": "https://k.example"}])

    settings = make_settings(source="koboldcpp", koboldcpp_url="http://kobold.local:5001")
    hit = run_with_transport(
        handler, lambda http: KoboldCppProvider(settings, Secrets(), http).search("q")
    )

    assert captured[0].url.path == "/api/extra/websearch"
    assert hit.text_bits == ["Kobold hit."]


def test_tavily_provider_maps_client_response(make_settings, monkeypatch):
    calls = []

    class FakeTavilyClient:
        async def search(self, **kwargs):
            calls.append(kwargs)
            return {
                "answer": "Tavily answer.",
                "results": [{"content": "Content.", "url": "https://t.example"}],
                "images": ["https://img.example/x.png"],
            }

    provider = TavilyProvider(make_settings(source="tavily"), Secrets(tavily_api_key="tvly"), None)
    monkeypatch.setattr(provider, "_client", lambda: FakeTavilyClient())

    hit = asyncio.run(provider.search("q"))

    assert calls[0]["query"] == "q"
    assert calls[0]["max_results"] == 10
    assert hit.text_bits == ["Tavily answer.", "Content."]
    assert hit.images == []


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def test_default_registry_knows_every_source():
    registry = create_default_registry(Secrets(), None)
    assert registry.sources() == sorted(source.value for source in SearchSource)


def test_run_search_turns_http_errors_into_empty_hit(make_settings):
    def handler(request):
        return httpx.Response(500, json={"error": "boom"})

    async def search(http):
        registry = create_default_registry(Secrets(serpapi_api_key="k"), http)
        return await registry.run_search("q", make_settings())

    result = run_with_transport(handler, search)

    assert not result.ok
    assert result.error.startswith("HTTPStatusError")
    assert result.hit.text_bits == []


def test_run_search_with_unregistered_source_fails_softly(make_settings):
    registry = ProviderRegistry(Secrets(), None)
    result = asyncio.run(registry.run_search("q", make_settings()))
    assert not result.ok
    assert "Unrecognized search source" in result.error


def test_availability_errors_count_as_unavailable(make_settings):
    registry = ProviderRegistry(Secrets(), None)
    assert asyncio.run(registry.is_available(make_settings())) is False


def test_successful_search_logs_the_adapter_name(registry, fake_backend, make_settings, caplog):
    fake_backend.hit = RawHit(text_bits=["Hit."], links=["https://x.example"])

    with caplog.at_level(logging.INFO, logger="websearch.providers.registry"):
        result = asyncio.run(registry.run_search("q", make_settings()))

    assert result.ok
    records = [r for r in caplog.records if getattr(r, "extra_fields", {}).get("provider")]
    assert records[-1].extra_fields == {"source": "serpapi", "provider": "fake"}
