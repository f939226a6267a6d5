from topwallets_bot.cache import MemoryCacheStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_get_returns_stored_value_until_expiry():
    clock = FakeClock()
    cache = MemoryCacheStore(timer=clock)

    cache.set("k", {"v": 1}, expires_in=60)
    assert cache.get("k") == {"v": 1}

    clock.now = 60.5
    assert cache.get("k") is None


def test_entries_keep_their_own_lifetime():
    clock = FakeClock()
    cache = MemoryCacheStore(timer=clock)

    cache.set("short", "a", expires_in=60)
    cache.set("long", "b", expires_in=300)

    clock.now = 120
    assert cache.get("short") is None
    assert cache.get("long") == "b"


def test_missing_key_is_none():
    assert MemoryCacheStore().get("nope") is None


def test_expire_removes_stale_entries():
    clock = FakeClock()
    cache = MemoryCacheStore(timer=clock)
    cache.set("a", 1, expires_in=10)
    cache.set("b", 2, expires_in=100)

    clock.now = 50
    assert cache.expire() == 1
    assert len(cache) == 1
    assert cache.get("b") == 2


def test_maxsize_bounds_the_store():
    cache = MemoryCacheStore(maxsize=2)
    cache.set("a", 1, expires_in=300)
    cache.set("b", 2, expires_in=300)
    cache.set("c", 3, expires_in=300)

    assert len(cache) == 2
    assert cache.get("c") == 3
