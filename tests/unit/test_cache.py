from eventfeed.pipeline.cache import SearchCache, cache_key
from eventfeed.search import SearchParams


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_equivalent_params_share_a_key():
    a = SearchParams(keyword="Jazz ", latitude=40.71281, longitude=-74.00601, categories=["party", "music"])
    b = SearchParams(keyword="jazz", latitude=40.712812, longitude=-74.006009, categories=["music", "party"])
    assert cache_key(a) == cache_key(b)

    assert cache_key(a) != cache_key(SearchParams(keyword="jazz", page=2))


def test_hit_returns_a_copy():
    cache = SearchCache(ttl_seconds=300, clock=FakeClock())
    params = SearchParams(keyword="jazz")
    response = {"events": [{"id": "seatgeek-1"}], "meta": {"cached": False}}

    assert cache.get(params) is None
    cache.set(params, response)
    hit = cache.get(params)

    assert hit == response
    hit["events"].clear()
    assert cache.get(params)["events"] == [{"id": "seatgeek-1"}]
    assert cache.stats() == {"size": 1, "hits": 2, "misses": 1}


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = SearchCache(ttl_seconds=300, clock=clock)
    params = SearchParams(keyword="jazz")
    cache.set(params, {"events": []})

    clock.now += 299
    assert cache.get(params) is not None

    clock.now += 2
    assert cache.get(params) is None
    assert len(cache) == 0


def test_set_prunes_expired_entries():
    clock = FakeClock()
    cache = SearchCache(ttl_seconds=10, clock=clock)
    cache.set(SearchParams(keyword="old"), {"events": []})

    clock.now += 11
    cache.set(SearchParams(keyword="new"), {"events": []})

    assert len(cache) == 1
