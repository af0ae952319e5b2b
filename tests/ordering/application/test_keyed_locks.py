"""Tests for KeyedLocks: per-key serialisation without an ever-growing registry."""

import threading
import time

import pytest
from ordering.cart.cart import CartOwner
from ordering.cart.identity import CartIdentityResolver, NewCartItem
from ordering.utils.locks import KeyedLocks, cart_locks


@pytest.fixture()
def locks():
    return KeyedLocks()


class TestRegistry:
    def test_entry_exists_only_while_held(self, locks):
        with locks.hold("cart:a", "cart:b"):
            assert len(locks) == 2
        assert len(locks) == 0

    def test_entry_is_dropped_when_the_body_raises(self, locks):
        with pytest.raises(RuntimeError):
            with locks.hold("cart:a"):
                raise RuntimeError("boom")
        assert len(locks) == 0

    def test_blank_and_repeated_keys_are_ignored(self, locks):
        with locks.hold("cart:a", "cart:a", None, ""):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_waiters_share_the_entry_until_the_last_one_leaves(self, locks):
        inside = threading.Event()
        release = threading.Event()

        def first():
            with locks.hold("cart:a"):
                inside.set()
                release.wait()

        def second():
            with locks.hold("cart:a"):
                pass

        t1 = threading.Thread(target=first)
        t1.start()
        inside.wait()
        t2 = threading.Thread(target=second)
        t2.start()
        time.sleep(0.05)

        assert len(locks) == 1
        release.set()
        t1.join()
        t2.join()
        assert len(locks) == 0

    def test_anonymous_cart_mutations_leave_no_entries(self, catalog):
        resolver = CartIdentityResolver()
        for n in range(5):
            owner = CartOwner(anonymous_token=f"tok-{n}")
            resolver.add_item(owner, NewCartItem(quantity=1, product_id="prod-002"))

        assert len(cart_locks) == 0


class TestSerialisation:
    def test_same_key_never_overlaps(self, locks):
        active = []
        overlaps = []
        barrier = threading.Barrier(6)

        def work():
            barrier.wait()
            with locks.hold("quote:q-1"):
                active.append(1)
                if len(active) > 1:
                    overlaps.append(len(active))
                time.sleep(0.01)
                active.pop()

        threads = [threading.Thread(target=work) for _ in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert overlaps == []
        assert len(locks) == 0
