"""Tests for the invitation coordinator against fake LiveKit capabilities."""
from __future__ import annotations

import json

import pytest

from invite_relay.core.errors import AlreadyIssued, DeliveryFailed, SessionNotFound, UpstreamError, ValidationError
from invite_relay.services.registry import TokenMark

from .fakes import DummyConnection, FakeRooms, decode_token, make_coordinator


@pytest.mark.asyncio
async def test_broadcast_skips_failing_room_and_reports_success():
    rooms = FakeRooms(rooms=["r1", "r2", "r3"], failing={"r2"})
    coordinator = make_coordinator(rooms)

    result = await coordinator.broadcast("meeting at 5", "admin")

    assert rooms.attempts == ["r1", "r2", "r3"]
    assert result.delivered == ["r1", "r3"]
    assert result.failed == ["r2"]
    assert rooms.sent == [
        ("r1", {"message": "meeting at 5", "participantName": "admin"}),
        ("r3", {"message": "meeting at 5", "participantName": "admin"}),
    ]


@pytest.mark.asyncio
async def test_broadcast_escapes_payload_as_json():
    rooms = FakeRooms(rooms=["r1"])
    coordinator = make_coordinator(rooms)

    await coordinator.broadcast('say "hi"\n', "ad\\min")

    assert rooms.sent == [("r1", {"message": 'say "hi"\n', "participantName": "ad\\min"})]


@pytest.mark.asyncio
async def test_broadcast_room_listing_failure_is_upstream_error():
    rooms = FakeRooms(rooms=["r1"])
    rooms.list_error = RuntimeError("connection refused")
    coordinator = make_coordinator(rooms)

    with pytest.raises(UpstreamError) as exc:
        await coordinator.broadcast("hello", "admin")

    assert exc.value.status_code == 500
    assert rooms.attempts == []


@pytest.mark.asyncio
@pytest.mark.parametrize("message,sender", [(None, "admin"), ("hello", None), ("", "admin")])
async def test_broadcast_requires_fields(message, sender):
    rooms = FakeRooms(rooms=["r1"])
    coordinator = make_coordinator(rooms)

    with pytest.raises(ValidationError):
        await coordinator.broadcast(message, sender)
    assert rooms.attempts == []


@pytest.mark.asyncio
async def test_accept_unregistered_participant_is_not_found():
    coordinator = make_coordinator()

    with pytest.raises(SessionNotFound) as exc:
        await coordinator.accept("demo", "alice")

    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_accept_closed_connection_is_not_found():
    coordinator = make_coordinator()
    await coordinator.registry.register("alice", DummyConnection("c1", open_=False).handle())

    with pytest.raises(SessionNotFound):
        await coordinator.accept("demo", "alice")


@pytest.mark.asyncio
async def test_accept_issues_room_token_once():
    coordinator = make_coordinator()
    handle = DummyConnection("c1").handle()
    await coordinator.registry.register("alice", handle)

    token = await coordinator.accept("demo", "alice")
    claims = decode_token(token)

    assert claims.identity == "alice"
    assert claims.name == "demo"
    assert (claims.video.room_join, claims.video.room) == (True, "demo")
    assert handle.attributes["token_issued"] is True

    with pytest.raises(AlreadyIssued) as exc:
        await coordinator.accept("demo", "alice")
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_accept_does_not_push_to_connection():
    coordinator = make_coordinator()
    conn = DummyConnection("c1")
    await coordinator.registry.register("alice", conn.handle())

    await coordinator.accept("demo", "alice")

    assert conn.messages == []


@pytest.mark.asyncio
async def test_accept_requires_fields():
    coordinator = make_coordinator()

    with pytest.raises(ValidationError):
        await coordinator.accept("demo", None)


@pytest.mark.asyncio
async def test_reject_only_acknowledges():
    coordinator = make_coordinator()
    handle = DummyConnection("c1").handle()
    await coordinator.registry.register("alice", handle)

    confirmation = await coordinator.reject("demo", "alice")

    assert confirmation == "Invitation rejected for room: demo"
    assert handle.attributes == {}
    assert await coordinator.registry.mark_token_issued("alice") is TokenMark.ISSUED

    with pytest.raises(ValidationError):
        await coordinator.reject(None, "alice")


@pytest.mark.asyncio
async def test_push_token_delivers_token_frame():
    coordinator = make_coordinator()
    conn = DummyConnection("c1")
    await coordinator.registry.register("alice", conn.handle())

    await coordinator.push_token("alice", "jwt-value")

    assert conn.messages == [{"type": "token", "token": "jwt-value"}]


@pytest.mark.asyncio
async def test_push_token_unknown_participant_changes_nothing():
    coordinator = make_coordinator()
    conn = DummyConnection("c1")
    await coordinator.registry.register("bob", conn.handle())

    with pytest.raises(SessionNotFound):
        await coordinator.push_token("alice", "jwt-value")

    assert conn.messages == []
    assert await coordinator.registry.identities() == ["bob"]


@pytest.mark.asyncio
async def test_push_token_send_failure_is_delivery_error():
    coordinator = make_coordinator()
    await coordinator.registry.register("alice", DummyConnection("c1", fail=True).handle())

    with pytest.raises(DeliveryFailed) as exc:
        await coordinator.push_token("alice", "jwt-value")

    assert exc.value.status_code == 500


@pytest.mark.asyncio
async def test_issue_token_is_repeatable_and_independent():
    coordinator = make_coordinator()

    tokens = [await coordinator.issue_token("demo", "alice") for _ in range(5)]

    for token in tokens:
        claims = decode_token(token)
        assert claims.identity == "alice"
        assert claims.name == "alice"
        assert (claims.video.room_join, claims.video.room) == (True, "demo")
    assert await coordinator.registry.identities() == []


@pytest.mark.asyncio
async def test_issue_token_requires_fields():
    coordinator = make_coordinator()

    with pytest.raises(ValidationError) as exc:
        await coordinator.issue_token("", "alice")

    assert exc.value.detail == "roomName and participantName are required"


@pytest.mark.asyncio
async def test_handle_message_registers_participant_info():
    coordinator = make_coordinator()
    handle = DummyConnection("c1").handle()

    identity = await coordinator.handle_message(
        handle, json.dumps({"type": "participantInfo", "participantName": "alice"})
    )

    assert identity == "alice"
    assert handle.attributes["identities"] == {"alice"}
    assert await coordinator.registry.lookup("alice") is handle


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        json.dumps(["participantInfo"]),
        json.dumps({"type": "chat", "participantName": "alice"}),
        json.dumps({"type": "participantInfo"}),
        json.dumps({"type": "participantInfo", "participantName": ""}),
        json.dumps({"type": "participantInfo", "participantName": 42}),
    ],
)
async def test_handle_message_ignores_other_frames(raw):
    coordinator = make_coordinator()

    assert await coordinator.handle_message(DummyConnection("c1").handle(), raw) is None
    assert await coordinator.registry.identities() == []


@pytest.mark.asyncio
async def test_release_drops_every_name_announced_on_a_connection():
    coordinator = make_coordinator()
    handle = DummyConnection("c1").handle()

    for name in ("alice", "bob"):
        await coordinator.handle_message(handle, json.dumps({"type": "participantInfo", "participantName": name}))
    assert sorted(await coordinator.registry.identities()) == ["alice", "bob"]

    assert await coordinator.release(handle) == ["alice", "bob"]
    assert await coordinator.registry.identities() == []


@pytest.mark.asyncio
async def test_release_keeps_names_taken_over_by_another_connection():
    coordinator = make_coordinator()
    old = DummyConnection("c1").handle()
    new = DummyConnection("c2").handle()

    await coordinator.handle_message(old, json.dumps({"type": "participantInfo", "participantName": "alice"}))
    await coordinator.handle_message(old, json.dumps({"type": "participantInfo", "participantName": "bob"}))
    await coordinator.handle_message(new, json.dumps({"type": "participantInfo", "participantName": "alice"}))

    assert await coordinator.release(old) == ["bob"]
    assert await coordinator.registry.lookup("alice") is new
