from __future__ import annotations

import threading

import pytest

from oscbridge.registry import HandlerRegistry


def test_handlers_keep_insertion_order_and_duplicates():
    registry = HandlerRegistry()

    def first(message):
        pass

    def second(message):
        pass

    registry.add("/foo", first)
    registry.add("/foo", second)
    registry.add("/foo", first)

    assert registry.handlers_for("/foo") == [first, second, first]
    assert registry.handlers_for("/missing") == []


def test_lookup_returns_a_copy():
    registry = HandlerRegistry()
    registry.add("/foo", print)

    handlers = registry.handlers_for("/foo")
    handlers.clear()

    assert registry.handlers_for("/foo") == [print]


def test_remove_only_first_registration():
    registry = HandlerRegistry()
    registry.add("/foo", print)
    registry.add("/foo", print)

    assert registry.remove("/foo", print)
    assert registry.handlers_for("/foo") == [print]
    assert registry.remove("/foo", print)
    assert registry.addresses() == []
    assert not registry.remove("/foo", print)


def test_non_callables_are_rejected():
    registry = HandlerRegistry()

    with pytest.raises(TypeError):
        registry.add("/foo", "not callable")
    with pytest.raises(TypeError):
        registry.set_catch_all(42)


def test_clear_drops_catch_all_and_handlers():
    registry = HandlerRegistry()
    registry.add("/foo", print)
    registry.set_catch_all(print)

    registry.clear()

    assert registry.catch_all is None
    assert registry.addresses() == []


def test_concurrent_registration_loses_nothing():
    registry = HandlerRegistry()

    def register(worker):
        for index in range(200):
            registry.add(f"/worker/{worker % 2}", lambda m, i=index: i)

    threads = [threading.Thread(target=register, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(registry.handlers_for("/worker/0")) == 400
    assert len(registry.handlers_for("/worker/1")) == 400
