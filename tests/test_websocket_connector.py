"""End-to-end connectivity tests against a local websocket server"""

import asyncio
import pytest
from aiohttp import web, WSMsgType
from aiohttp import test_utils
from connector_kit.core.event_sink import QueueEventSink
from connector_kit.core.models import EmptyConfig
from connectors.websocket_connector import WebsocketConnector, WebsocketTable


async def start_server(handler):
    app = web.Application()
    app.router.add_get("/feed", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server, f"ws://{server.host}:{server.port}/feed"


async def run_test(endpoint, subscription_message=None, wait_timeout=2.0):
    connector = WebsocketConnector(wait_timeout=wait_timeout)
    sink = QueueEventSink()
    table = WebsocketTable(endpoint=endpoint, subscription_message=subscription_message)
    task = connector.run_connectivity_test("feed", EmptyConfig(), table, None, sink)
    events = await sink.collect(timeout=5)
    await task
    return events


async def greeting_handler(request):
    ws = web.WebSocketResponse()
    await ws.prepare(request)
    await ws.send_str("hello")
    await ws.receive()
    return ws


async def silent_handler(request):
    ws = web.WebSocketResponse()
    await ws.prepare(request)
    await ws.receive()
    return ws


async def closing_handler(request):
    ws = web.WebSocketResponse()
    await ws.prepare(request)
    await ws.close()
    return ws


@pytest.mark.asyncio
async def test_unreachable_endpoint():
    """A refused connection yields exactly one terminal error"""
    events = await run_test("ws://127.0.0.1:1/feed")

    assert len(events) == 1
    assert events[0].error and events[0].done
    assert events[0].message.startswith("Failed to connect")


@pytest.mark.asyncio
async def test_server_sends_message():
    server, endpoint = await start_server(greeting_handler)
    try:
        events = await run_test(endpoint)
    finally:
        await server.close()

    assert [(e.error, e.done) for e in events] == [(False, False), (False, False), (False, True)]
    assert events[0].message == "Successfully connected to websocket server"
    assert events[1].message == "Received message from websocket"
    assert events[2].message == "Successfully validated websocket connection"


@pytest.mark.asyncio
async def test_subscription_message_reaches_server():
    received = []

    async def subscribe_handler(request):
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        msg = await ws.receive()
        if msg.type == WSMsgType.TEXT:
            received.append(msg.data)
            await ws.send_str("subscribed")
        await ws.receive()
        return ws

    server, endpoint = await start_server(subscribe_handler)
    try:
        events = await run_test(endpoint, subscription_message='{"type": "subscribe"}')
    finally:
        await server.close()

    assert received == ['{"type": "subscribe"}']
    assert [e.message for e in events][:2] == [
        "Successfully connected to websocket server",
        "Sent subscription message",
    ]
    assert events[-1].done and not events[-1].error


@pytest.mark.asyncio
async def test_silent_server_times_out():
    server, endpoint = await start_server(silent_handler)
    try:
        events = await run_test(endpoint, wait_timeout=0.2)
    finally:
        await server.close()

    assert len(events) == 2
    assert events[-1].error and events[-1].done
    assert events[-1].message == "Did not receive any messages after 0.2 seconds"


@pytest.mark.asyncio
async def test_server_closes_before_sending():
    server, endpoint = await start_server(closing_handler)
    try:
        events = await run_test(endpoint)
    finally:
        await server.close()

    assert events[-1].error and events[-1].done
    assert events[-1].message == "Websocket disconnected before sending message"


@pytest.mark.asyncio
async def test_silent_tcp_peer_fails_handshake():
    """A peer that accepts TCP but never answers the upgrade ends in one connect failure"""
    peers = []

    async def accept_and_hang(reader, writer):
        peers.append(writer)
        await reader.read()
        writer.close()

    server = await asyncio.start_server(accept_and_hang, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        events = await run_test(f"ws://127.0.0.1:{port}/feed", wait_timeout=0.3)
    finally:
        for writer in peers:
            writer.close()
        server.close()
        await server.wait_closed()

    assert len(events) == 1
    assert events[0].error and events[0].done
    assert events[0].message.startswith("Failed to connect")
