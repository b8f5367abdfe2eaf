"""Unit tests for ExternalStoreBinding."""

import logging

import pytest

from slicestore import ExternalStoreBinding, SliceStoreConfig, UsageError


class FakeSource:
    """Minimal subscribe/snapshot pair whose value is set directly."""

    def __init__(self, value):
        self.value = value
        self.listeners = []
        self.subscribe_calls = 0
        # one slot object, as a host would hold it
        self.subscribe = self._subscribe

    def _subscribe(self, listener):
        self.subscribe_calls += 1
        self.listeners.append(listener)

        def unsubscribe():
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    def get_snapshot(self):
        return self.value

    def emit(self, value):
        self.value = value
        for listener in list(self.listeners):
            listener()


@pytest.mark.unit
def test_read_subscribes_once_for_a_stable_slot():
    """Repeated reads with the same subscribe slot do not resubscribe"""
    source = FakeSource("x")
    binding = ExternalStoreBinding()

    for _ in range(3):
        assert binding.read(source.subscribe, source.get_snapshot) == "x"

    assert source.subscribe_calls == 1
    assert binding.subscribe_count == 1
    assert binding.subscribed


@pytest.mark.unit
def test_new_slot_replaces_subscription():
    """A different subscribe slot unsubscribes the old one first"""
    first, second = FakeSource("a"), FakeSource("b")
    binding = ExternalStoreBinding()

    binding.read(first.subscribe, first.get_snapshot)
    binding.read(second.subscribe, second.get_snapshot)

    assert first.listeners == []
    assert len(second.listeners) == 1
    assert binding.subscribe_count == 2


@pytest.mark.unit
def test_store_change_with_new_reference_marks_stale():
    """A notification whose snapshot is a new object calls on_change once"""
    changes = []
    source = FakeSource({"v": 1})
    binding = ExternalStoreBinding(lambda: changes.append(1))
    binding.read(source.subscribe, source.get_snapshot)

    source.emit({"v": 2})
    source.emit({"v": 3})

    assert binding.stale
    assert changes == [1]

    binding.read(source.subscribe, source.get_snapshot)
    assert not binding.stale


@pytest.mark.unit
def test_store_change_with_same_reference_is_ignored():
    """A notification that yields the rendered object is not a change"""
    changes = []
    value = {"v": 1}
    source = FakeSource(value)
    binding = ExternalStoreBinding(lambda: changes.append(1))
    binding.read(source.subscribe, source.get_snapshot)

    source.emit(value)

    assert not binding.stale
    assert changes == []


@pytest.mark.unit
@pytest.mark.edge_case
def test_unstable_snapshot_logs_warning(caplog):
    """A snapshot slot that builds a new object per call is flagged"""
    source = FakeSource(None)
    binding = ExternalStoreBinding()

    with caplog.at_level(logging.WARNING, logger="slicestore"):
        binding.read(source.subscribe, lambda: {"fresh": True})

    assert "different object on a repeated call" in caplog.text


@pytest.mark.unit
def test_snapshot_check_can_be_disabled(caplog):
    """check_snapshot_stability=False skips the double read"""
    calls = []
    source = FakeSource(None)
    binding = ExternalStoreBinding(
        config=SliceStoreConfig(check_snapshot_stability=False)
    )

    def snapshot():
        calls.append(1)
        return {"fresh": True}

    with caplog.at_level(logging.WARNING, logger="slicestore"):
        binding.read(source.subscribe, snapshot)

    assert caplog.text == ""
    # one read for the value, one re-check after subscribing
    assert len(calls) == 2


@pytest.mark.unit
def test_close_is_idempotent_and_final():
    """close() releases the subscription; reading afterwards is a usage error"""
    source = FakeSource(1)
    binding = ExternalStoreBinding()
    binding.read(source.subscribe, source.get_snapshot)

    binding.close()
    binding.close()

    assert source.listeners == []
    assert not binding.subscribed
    with pytest.raises(UsageError):
        binding.read(source.subscribe, source.get_snapshot)
