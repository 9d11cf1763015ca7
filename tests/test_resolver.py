import asyncio
import random
from urllib.parse import unquote

import httpx

from conftest import FakeProvider, FakeValidator, mock_client, run, unthrottle
from gameshelf_app.artwork.config import ArtworkSettings
from gameshelf_app.artwork.models import PlatformTag, ProviderId
from gameshelf_app.artwork.providers import build_default_providers
from gameshelf_app.artwork.resolver import ArtworkResolver, resolve_artwork

SETTINGS = ArtworkSettings(provider_timeout=2.0, probe_timeout=1.0, boxart_base_url="https://thumbs.example")

DEAL_THUMB = "https://cdn.cheapshark.example/wukong.jpg"
WIKI_THUMB = "https://upload.wikimedia.example/wukong.jpg"
APP_ART = "https://is1-ssl.mzstatic.example/thumb/600x600bb.jpg"


class CatalogStub:
    """Routes mocked requests to per-host handlers and records them."""

    def __init__(self, cheapshark=None, wikipedia=None, itunes=None, archive=None):
        self.requests = []
        self.cheapshark = cheapshark or (lambda request: httpx.Response(200, json=[]))
        self.wikipedia = wikipedia or (lambda request: httpx.Response(200, json={}))
        self.itunes = itunes or (lambda request: httpx.Response(200, json={"results": []}))
        self.archive = archive or (lambda request: httpx.Response(404))

    def __call__(self, request):
        self.requests.append(request)
        host = request.url.host
        if "cheapshark" in host:
            return self.cheapshark(request)
        if "wikipedia" in host:
            return self.wikipedia(request)
        if "itunes" in host:
            return self.itunes(request)
        return self.archive(request)

    def hosts(self):
        return {request.url.host for request in self.requests}


def _wukong_deals(request):
    if request.url.params["title"] == "Black Myth: Wukong":
        return httpx.Response(200, json=[{"external": "Black Myth: Wukong", "thumb": DEAL_THUMB}])
    return httpx.Response(200, json=[])


def _wukong_wiki(request):
    return httpx.Response(200, json={"query": {"pages": {
        "1": {"title": "Black Myth: Wukong", "index": 1, "thumbnail": {"source": WIKI_THUMB}},
    }}})


def _wukong_itunes(request):
    return httpx.Response(200, json={"results": [
        {"trackName": "Black Myth: Wukong", "artworkUrl100": APP_ART.replace("600x600", "100x100")},
    ]})


async def _resolve(stub, title, hint=None, randomize=False, rng=None):
    async with mock_client(stub) as client:
        providers = unthrottle(*build_default_providers(SETTINGS, client=client))
        async with ArtworkResolver(settings=SETTINGS, client=client, providers=providers, rng=rng) as resolver:
            return await resolver.resolve_artwork(title, hint, randomize)


def test_bilingual_title_without_hint_skips_archive():
    stub = CatalogStub(cheapshark=_wukong_deals, wikipedia=_wukong_wiki, itunes=_wukong_itunes)

    url = run(_resolve(stub, "黑神话：悟空 (Black Myth: Wukong)"))

    assert url == DEAL_THUMB
    assert stub.hosts() == {"www.cheapshark.com", "en.wikipedia.org", "itunes.apple.com"}
    titles = {r.url.params.get("title") for r in stub.requests if "cheapshark" in r.url.host}
    assert titles == {"Black Myth: Wukong"}


def test_lower_priority_provider_wins_when_higher_ones_are_empty():
    stub = CatalogStub(wikipedia=_wukong_wiki, itunes=_wukong_itunes)

    assert run(_resolve(stub, "黑神话：悟空 (Black Myth: Wukong)")) == WIKI_THUMB


def test_archive_hit_beats_other_catalogs():
    def archive(request):
        if request.method == "HEAD" and unquote(request.url.path).endswith("Black Myth_ Wukong (USA).png"):
            return httpx.Response(200, headers={"Content-Type": "image/png"})
        return httpx.Response(404)

    stub = CatalogStub(cheapshark=_wukong_deals, wikipedia=_wukong_wiki, itunes=_wukong_itunes, archive=archive)

    url = run(_resolve(stub, "Black Myth: Wukong", hint=PlatformTag.PS5))

    assert url.startswith("https://thumbs.example/Sony%20-%20PlayStation%205/Named_Boxarts/")
    assert unquote(url).endswith("Black Myth_ Wukong (USA).png")


def test_fallback_to_full_title():
    def deals(request):
        if request.url.params["title"] == "塞尔达 (Zelda TOTK)":
            return httpx.Response(200, json=[{"external": "Zelda", "thumb": DEAL_THUMB}])
        return httpx.Response(200, json=[])

    stub = CatalogStub(cheapshark=deals)

    assert run(_resolve(stub, "塞尔达 (Zelda TOTK)")) == DEAL_THUMB


def test_nothing_found_returns_none():
    stub = CatalogStub()

    assert run(_resolve(stub, "Entirely Unknown Game")) is None


def test_all_catalogs_failing_returns_none():
    def broken(request):
        raise httpx.ConnectError("offline", request=request)

    stub = CatalogStub(cheapshark=broken, wikipedia=broken, itunes=broken, archive=broken)

    assert run(_resolve(stub, "Hades", hint="Switch 1/2")) is None


def test_repeated_deterministic_calls_are_identical():
    stub = CatalogStub(cheapshark=_wukong_deals, wikipedia=_wukong_wiki, itunes=_wukong_itunes)

    first = run(_resolve(stub, "Black Myth: Wukong"))
    second = run(_resolve(stub, "Black Myth: Wukong"))

    assert first == second == DEAL_THUMB


def test_randomize_draws_from_the_merged_pool():
    stub = CatalogStub(cheapshark=_wukong_deals, wikipedia=_wukong_wiki, itunes=_wukong_itunes)
    rng = random.Random(7)

    picks = {run(_resolve(stub, "Black Myth: Wukong", randomize=True, rng=rng)) for _ in range(30)}

    assert picks == {DEAL_THUMB, WIKI_THUMB, APP_ART}


def test_empty_title_makes_no_calls():
    providers = [
        FakeProvider(ProviderId.BOX_ART_ARCHIVE, requires_platform=True, requires_validation=True),
        FakeProvider(ProviderId.DEAL_AGGREGATOR),
        FakeProvider(ProviderId.ENCYCLOPEDIA_THUMBNAIL),
        FakeProvider(ProviderId.APP_STORE_ART),
    ]
    validator = FakeValidator()
    resolver = ArtworkResolver(settings=SETTINGS, providers=providers, validator=validator)

    assert run(resolver.resolve_artwork("")) is None
    assert run(resolver.resolve_artwork("   ", PlatformTag.PS5, True)) is None
    assert all(provider.calls == [] for provider in providers)
    assert validator.calls == []


def test_module_level_helper_short_circuits_blank_title():
    assert run(resolve_artwork("  ")) is None


def test_resolver_never_raises():
    class ExplodingAggregator:
        async def resolve(self, query):
            raise RuntimeError("unexpected")

    resolver = ArtworkResolver(settings=SETTINGS, providers=[], validator=FakeValidator())
    resolver.aggregator = ExplodingAggregator()

    assert run(resolver.resolve_artwork("Hades")) is None


def test_unknown_platform_string_behaves_as_no_hint():
    box = FakeProvider(ProviderId.BOX_ART_ARCHIVE, {"Hades": ["https://thumbs.example/h.png"]},
                       requires_platform=True, requires_validation=True)
    resolver = ArtworkResolver(settings=SETTINGS, providers=[box], validator=FakeValidator())

    assert run(resolver.resolve_artwork("Hades", "Atari Jaguar")) is None
    assert box.calls == []


def test_available_providers_in_priority_order():
    resolver = ArtworkResolver(settings=SETTINGS)

    assert list(resolver.get_available_providers()) == [p.value for p in ProviderId]


def test_health_check_reports_each_provider():
    providers = [
        FakeProvider(ProviderId.BOX_ART_ARCHIVE, {"Tetris": ["https://thumbs.example/t.png"]},
                     requires_platform=True, requires_validation=True),
        FakeProvider(ProviderId.DEAL_AGGREGATOR, {"Tetris": ["https://deals.example/t.jpg"]}),
        FakeProvider(ProviderId.ENCYCLOPEDIA_THUMBNAIL, error=RuntimeError("down")),
        FakeProvider(ProviderId.APP_STORE_ART),
    ]
    validator = FakeValidator(alive={"https://thumbs.example/t.png"})
    resolver = ArtworkResolver(settings=SETTINGS, providers=providers, validator=validator)

    assert run(resolver.health_check()) == {
        "box_art_archive": True,
        "deal_aggregator": True,
        "encyclopedia_thumbnail": False,
        "app_store_art": False,
    }


def test_concurrent_resolutions_under_default_limits_all_resolve():
    def itunes(request):
        term = request.url.params["term"]
        return httpx.Response(200, json={"results": [
            {"trackName": term, "artworkUrl100": f"https://is1-ssl.mzstatic.example/{term.replace(' ', '')}/100x100bb.jpg"},
        ]})

    stub = CatalogStub(itunes=itunes)
    titles = [f"Game {i}" for i in range(4)]

    async def batch():
        async with mock_client(stub) as client:
            semaphore = asyncio.Semaphore(4)
            async with ArtworkResolver(settings=ArtworkSettings(), client=client) as resolver:
                async def _one(title):
                    async with semaphore:
                        return await resolver.resolve_artwork(title)

                return await asyncio.gather(*(_one(title) for title in titles))

    assert run(batch()) == [
        f"https://is1-ssl.mzstatic.example/Game{i}/600x600bb.jpg" for i in range(4)
    ]
