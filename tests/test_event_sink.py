"""Tests for the queue backed event sink"""

import asyncio
import pytest
from connector_kit.core.event_sink import QueueEventSink
from connector_kit.core.models import TestSourceMessage


@pytest.mark.asyncio
async def test_observer_reads_until_done():
    sink = QueueEventSink()
    await sink.send(TestSourceMessage.info("one"))
    await sink.send(TestSourceMessage.success("two"))

    events = await sink.collect(timeout=1)

    assert [e.message for e in events] == ["one", "two"]


@pytest.mark.asyncio
async def test_close_ends_stream_without_done():
    """Producer stopping early still terminates the observer's loop"""
    sink = QueueEventSink()
    await sink.send(TestSourceMessage.info("one"))
    await sink.close()

    events = await sink.collect(timeout=1)

    assert [e.message for e in events] == ["one"]
    assert await sink.send(TestSourceMessage.info("after close")) is False


@pytest.mark.asyncio
async def test_send_after_disconnect_is_refused():
    sink = QueueEventSink()
    sink.disconnect()

    assert sink.is_disconnected
    assert await sink.send(TestSourceMessage.info("nobody listening")) is False
    # Closing a disconnected sink must not block
    await asyncio.wait_for(sink.close(), 1)


@pytest.mark.asyncio
async def test_disconnect_releases_blocked_producer():
    """A producer waiting on a full queue is released with a refusal"""
    sink = QueueEventSink(maxsize=1)
    assert await sink.send(TestSourceMessage.info("fills the queue")) is True

    pending = asyncio.ensure_future(sink.send(TestSourceMessage.info("blocked")))
    await asyncio.sleep(0.01)
    assert not pending.done()

    sink.disconnect()

    assert await asyncio.wait_for(pending, 1) is False


def test_message_json_shape():
    """One JSON object per event with error/done/message"""
    assert TestSourceMessage.fail("boom").to_json() == '{"error":true,"done":true,"message":"boom"}'
    assert TestSourceMessage.info("hi") == TestSourceMessage(error=False, done=False, message="hi")
