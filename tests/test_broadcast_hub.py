"""Tests for the BroadcastHub fan-out."""

import asyncio

import pytest

from jobtracker.services.broadcast_hub import BroadcastHub, ChangeEvent, EventType
from tests.helpers import RecordingObserver, wait_for_messages
from tests.helpers.observers import CancelSwallowingObserver, FailingObserver, StalledObserver


def _hub(records=None, **kwargs):
    state = {"records": list(records or [])}

    async def snapshot():
        return list(state["records"])

    hub = BroadcastHub(snapshot, **kwargs)
    return hub, state


class TestChangeEvent:
    def test_created_and_updated_carry_the_record(self):
        record = {"id": "a1", "company": "Acme"}
        assert ChangeEvent.created(record).to_message() == {"type": "NEW_APPLICATION", "application": record}
        assert ChangeEvent.updated(record).to_message() == {"type": "APPLICATION_UPDATED", "application": record}

    def test_deleted_carries_the_id(self):
        assert ChangeEvent.deleted("a1").to_message() == {"type": "APPLICATION_DELETED", "applicationId": "a1"}


class TestRegister:
    @pytest.mark.asyncio
    async def test_new_observer_receives_snapshot_first(self):
        hub, _ = _hub([{"id": "a1"}])
        observer = RecordingObserver()

        await hub.register(observer)
        await wait_for_messages(observer, 1)

        assert observer.messages[0] == {"type": "INITIAL_DATA", "applications": [{"id": "a1"}]}
        await hub.close()

    @pytest.mark.asyncio
    async def test_late_joiner_gets_only_current_snapshot(self):
        hub, state = _hub()
        for i in range(3):
            state["records"].append({"id": f"a{i}"})
            hub.publish(ChangeEvent.created({"id": f"a{i}"}))

        observer = RecordingObserver()
        await hub.register(observer)
        await wait_for_messages(observer, 1)
        await asyncio.sleep(0.05)

        assert observer.types == ["INITIAL_DATA"]
        assert len(observer.messages[0]["applications"]) == 3
        await hub.close()

    @pytest.mark.asyncio
    async def test_event_published_during_snapshot_follows_it(self):
        release = asyncio.Event()

        async def slow_snapshot():
            await release.wait()
            return []

        hub = BroadcastHub(slow_snapshot)
        observer = RecordingObserver()
        await hub.register(observer)

        hub.publish(ChangeEvent.created({"id": "a1"}))
        release.set()
        await wait_for_messages(observer, 2)

        assert observer.types == ["INITIAL_DATA", "NEW_APPLICATION"]
        await hub.close()

    @pytest.mark.asyncio
    async def test_registering_twice_is_a_no_op(self):
        hub, _ = _hub()
        observer = RecordingObserver()
        await hub.register(observer)
        await hub.register(observer)
        await wait_for_messages(observer, 1)
        await asyncio.sleep(0.05)

        assert hub.observer_count == 1
        assert observer.types == ["INITIAL_DATA"]
        await hub.close()


class TestPublish:
    @pytest.mark.asyncio
    async def test_delivers_to_every_observer_in_order(self):
        hub, _ = _hub()
        observers = [RecordingObserver() for _ in range(3)]
        for observer in observers:
            await hub.register(observer)

        assert hub.publish(ChangeEvent.created({"id": "a1"})) == 3
        hub.publish(ChangeEvent.deleted("a1"))

        for observer in observers:
            await wait_for_messages(observer, 3)
            assert observer.types == ["INITIAL_DATA", "NEW_APPLICATION", "APPLICATION_DELETED"]
        await hub.close()

    @pytest.mark.asyncio
    async def test_publish_without_observers(self):
        hub, _ = _hub()
        assert hub.publish(ChangeEvent.deleted("a1")) == 0

    @pytest.mark.asyncio
    async def test_failing_observer_is_dropped_without_affecting_others(self):
        hub, _ = _hub()
        healthy, broken = RecordingObserver(), FailingObserver()
        await hub.register(healthy)
        await hub.register(broken)
        await wait_for_messages(broken, 1)

        hub.publish(ChangeEvent.created({"id": "a1"}))
        await wait_for_messages(healthy, 2)
        await asyncio.sleep(0.05)

        assert not hub.is_registered(broken)
        assert broken.closed
        assert hub.is_registered(healthy)

        hub.publish(ChangeEvent.deleted("a1"))
        await wait_for_messages(healthy, 3)
        await hub.close()

    @pytest.mark.asyncio
    async def test_stalled_observer_times_out_and_is_dropped(self):
        hub, _ = _hub(send_timeout=0.05)
        stalled = StalledObserver()
        await hub.register(stalled)
        await wait_for_messages(stalled, 1)

        hub.publish(ChangeEvent.created({"id": "a1"}))
        await asyncio.sleep(0.3)

        assert not hub.is_registered(stalled)
        assert stalled.closed

    @pytest.mark.asyncio
    async def test_observer_with_full_queue_is_dropped_immediately(self):
        hub, _ = _hub(max_pending=2, send_timeout=10.0)
        stalled = StalledObserver()
        await hub.register(stalled)
        await wait_for_messages(stalled, 1)

        # First event is taken by the stalled send, two more fill the queue
        for i in range(3):
            hub.publish(ChangeEvent.created({"id": f"a{i}"}))
            await asyncio.sleep(0.01)
        assert hub.is_registered(stalled)

        hub.publish(ChangeEvent.created({"id": "overflow"}))
        assert not hub.is_registered(stalled)
        await asyncio.sleep(0.05)
        assert stalled.closed

    @pytest.mark.asyncio
    async def test_failing_snapshot_drops_observer(self):
        async def broken_snapshot():
            raise RuntimeError("store down")

        hub = BroadcastHub(broken_snapshot)
        observer = RecordingObserver()
        await hub.register(observer)
        await asyncio.sleep(0.05)

        assert not hub.is_registered(observer)
        assert observer.messages == []


class TestUnregister:
    @pytest.mark.asyncio
    async def test_unregistered_observer_receives_nothing_more(self):
        hub, _ = _hub()
        observer = RecordingObserver()
        await hub.register(observer)
        await wait_for_messages(observer, 1)

        await hub.unregister(observer)
        hub.publish(ChangeEvent.created({"id": "a1"}))
        await asyncio.sleep(0.05)

        assert hub.observer_count == 0
        assert observer.types == [EventType.INITIAL_DATA.value]

    @pytest.mark.asyncio
    async def test_is_idempotent(self):
        hub, _ = _hub()
        observer = RecordingObserver()
        await hub.unregister(observer)
        await hub.register(observer)
        await hub.unregister(observer)
        await hub.unregister(observer)
        assert hub.observer_count == 0

    @pytest.mark.asyncio
    async def test_close_unregisters_everyone(self):
        hub, _ = _hub()
        for _ in range(3):
            await hub.register(RecordingObserver())
        await hub.close()
        assert hub.observer_count == 0

    @pytest.mark.asyncio
    async def test_close_right_after_register_finishes(self):
        hub, _ = _hub([{"id": "a1"}])
        observers = [RecordingObserver() for _ in range(3)]
        for observer in observers:
            await hub.register(observer)

        await asyncio.wait_for(hub.close(), timeout=3)

        assert hub.observer_count == 0

    @pytest.mark.asyncio
    async def test_unregister_finishes_when_send_absorbs_the_cancel(self):
        hub, _ = _hub()
        observer = CancelSwallowingObserver()
        await hub.register(observer)
        await wait_for_messages(observer, 1)

        hub.publish(ChangeEvent.created({"id": "a1"}))
        await asyncio.wait_for(observer.sending.wait(), timeout=2)
        await asyncio.wait_for(hub.unregister(observer), timeout=3)

        hub.publish(ChangeEvent.deleted("a1"))
        await asyncio.sleep(0.05)
        assert hub.observer_count == 0
        assert "APPLICATION_DELETED" not in observer.types
