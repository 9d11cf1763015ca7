import random
from collections import Counter

from gameshelf_app.artwork.models import Candidate, CandidateSet, ProviderId
from gameshelf_app.artwork.selector import select


def _set(*urls):
    return CandidateSet.merge(Candidate(url, ProviderId.DEAL_AGGREGATOR) for url in urls)


def test_empty_set_returns_none():
    assert select(CandidateSet()) is None
    assert select(CandidateSet(), randomize=True) is None


def test_deterministic_pick_is_first_candidate():
    candidates = _set("https://a.example/1.png", "https://a.example/2.png")

    assert all(select(candidates) == "https://a.example/1.png" for _ in range(50))


def test_randomize_with_single_candidate():
    candidates = _set("https://a.example/only.png")

    assert select(candidates, randomize=True) == "https://a.example/only.png"


def test_seeded_rng_is_reproducible():
    candidates = _set(*(f"https://a.example/{i}.png" for i in range(5)))

    first = [select(candidates, True, random.Random(42)) for _ in range(3)]
    second = [select(candidates, True, random.Random(42)) for _ in range(3)]

    assert first == second


def test_randomize_is_roughly_uniform():
    urls = [f"https://a.example/{i}.png" for i in range(4)]
    candidates = _set(*urls)
    rng = random.Random(1234)

    counts = Counter(select(candidates, randomize=True, rng=rng) for _ in range(1000))

    assert set(counts) == set(urls)
    for url in urls:
        assert abs(counts[url] / 1000 - 0.25) < 0.06
