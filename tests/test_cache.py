"""
Tests for the amendment cache.
"""

import threading

from theme_amender.cache import AmendmentCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


KEY = ("acme", "abc123", "compact")


class TestAmendmentCache:
    def test_miss(self):
        assert AmendmentCache().get(KEY) is None

    def test_put_then_get(self):
        cache = AmendmentCache()
        cache.put(KEY, {"a": 1}, [{"op": "replace", "path": "/a", "value": 1}])
        entry = cache.get(KEY)
        assert entry.tokens == {"a": 1}
        assert entry.diff == [{"op": "replace", "path": "/a", "value": 1}]

    def test_entries_are_copies(self):
        cache = AmendmentCache()
        tokens = {"a": {"b": 1}}
        cache.put(KEY, tokens, [])
        tokens["a"]["b"] = 2
        cache.get(KEY).tokens["a"]["b"] = 3
        assert cache.get(KEY).tokens == {"a": {"b": 1}}

    def test_expired_entry_is_a_miss(self):
        clock = FakeClock()
        cache = AmendmentCache(ttl_seconds=3600, clock=clock)
        cache.put(KEY, {"a": 1}, [])
        clock.now += 3599
        assert cache.get(KEY) is not None
        clock.now += 2
        assert cache.get(KEY) is None

    def test_expired_entries_are_swept_on_write(self):
        clock = FakeClock()
        cache = AmendmentCache(ttl_seconds=10, clock=clock)
        cache.put(KEY, {"a": 1}, [])
        clock.now += 11
        assert len(cache) == 1
        cache.put(("acme", "def456", "compact"), {"a": 2}, [])
        assert len(cache) == 1

    def test_key_includes_fingerprint(self):
        cache = AmendmentCache()
        cache.put(KEY, {"a": 1}, [])
        assert cache.get(("acme", "other-fingerprint", "compact")) is None

    def test_lock_is_per_key(self):
        cache = AmendmentCache()
        assert cache.lock_for(KEY) is cache.lock_for(KEY)
        assert cache.lock_for(KEY) is not cache.lock_for(("acme", "abc123", "spacious"))

    def test_lock_serialises_same_key(self):
        cache = AmendmentCache()
        order = []
        entered = threading.Event()

        def worker(name):
            with cache.lock_for(KEY):
                order.append(f"{name}-in")
                entered.set()
                order.append(f"{name}-out")

        with cache.lock_for(KEY):
            t = threading.Thread(target=worker, args=("b",))
            t.start()
            assert not entered.wait(0.1)
            order.append("a")
        t.join(timeout=5)
        assert order == ["a", "b-in", "b-out"]

    def test_lock_survives_a_sweep(self):
        cache = AmendmentCache()
        first = cache.lock_for(KEY)
        cache.put(("acme", "def456", "compact"), {}, [])
        assert cache.lock_for(KEY) is first

    def test_held_lock_survives_expiry_sweep(self):
        clock = FakeClock()
        cache = AmendmentCache(ttl_seconds=1, clock=clock)
        with cache.hold(KEY):
            held = cache.lock_for(KEY)
            clock.now += 10
            cache.put(("acme", "def456", "compact"), {}, [])
            assert cache.lock_for(KEY) is held
            assert held.locked()
        assert not held.locked()

    def test_hold_serialises_same_key(self):
        cache = AmendmentCache()
        active = []
        overlap = []

        def worker():
            with cache.hold(KEY):
                active.append(1)
                overlap.append(len(active))
                threading.Event().wait(0.02)
                active.pop()

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        assert overlap == [1, 1, 1, 1]
