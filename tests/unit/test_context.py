"""Unit tests for StoreContext lookup."""

import threading

import pytest

from slicestore import StateHolder, StoreContext, StoreLookup


@pytest.mark.unit
def test_lookup_without_provider_returns_default(context):
    """An empty context resolves to its default (None unless given)"""
    assert context.lookup() is None

    fallback = StateHolder(0).store
    assert StoreContext(default=fallback).lookup() is fallback


@pytest.mark.unit
def test_provide_scopes_the_store_to_the_block(context, store):
    """The store is only visible inside the provide block"""
    with context.provide(store) as provided:
        assert provided is store
        assert context.lookup() is store
        assert context.current is store

    assert context.lookup() is None


@pytest.mark.unit
def test_nested_provide_shadows_outer_store(context):
    """The innermost provided store wins"""
    outer, inner = StateHolder(1).store, StateHolder(2).store

    with context.provide(outer):
        with context.provide(inner):
            assert context.lookup() is inner
        assert context.lookup() is outer


@pytest.mark.unit
@pytest.mark.edge_case
def test_provide_unwinds_on_error(context, store):
    """An exception inside the block still pops the store"""
    with pytest.raises(ValueError):
        with context.provide(store):
            raise ValueError("boom")

    assert context.lookup() is None


@pytest.mark.unit
def test_provided_store_is_per_thread(context, store):
    """Other threads do not see stores provided on this one"""
    seen = []

    with context.provide(store):
        worker = threading.Thread(target=lambda: seen.append(context.lookup()))
        worker.start()
        worker.join()

    assert seen == [None]


@pytest.mark.unit
def test_store_context_satisfies_lookup_protocol(context):
    """StoreContext can be passed wherever a StoreLookup is expected"""
    assert isinstance(context, StoreLookup)


@pytest.mark.unit
def test_reset_state_drops_provided_stores(context, store):
    """_reset_state clears every store provided on this thread"""
    context._get_stack().append(store)
    assert context.lookup() is store

    context._reset_state()

    assert context.lookup() is None
