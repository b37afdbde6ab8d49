"""测试会话存储"""

from support_relay.chat import summarize, to_wire


def test_get_or_create_is_idempotent(store):
    first = store.get_or_create("client-a")
    second = store.get_or_create("client-a")

    assert first.id == second.id
    assert len(store) == 1


def test_distinct_clients_get_distinct_sessions(store):
    a = store.get_or_create("client-a")
    b = store.get_or_create("client-b")

    assert a.id != b.id
    assert store.find_by_client_id("client-b") is b
    assert store.find_by_client_id("nobody") is None


def test_new_session_is_empty_with_current_timestamps(store, clock):
    session = store.get_or_create("client-a")

    assert session.messages == []
    assert session.created_at == clock.now
    assert session.last_activity == clock.now


def test_append_message_defaults(store, clock):
    session = store.get_or_create("client-a")
    clock.advance(seconds=5)

    message = store.append_message(session, "client", "hi")

    assert session.messages == [message]
    assert message.sender == "client"
    assert message.text == "hi"
    assert message.seen is False
    assert message.time == clock.now
    assert session.last_activity == clock.now


def test_mark_seen_only_touches_client_messages(store):
    session = store.get_or_create("client-a")
    a = store.append_message(session, "client", "A")
    b = store.append_message(session, "client", "B")
    b.seen = True
    c = store.append_message(session, "admin", "C")

    flipped = store.mark_seen(session)

    assert flipped == 1
    assert [m.id for m in session.messages] == [a.id, b.id, c.id]
    assert a.seen is True
    assert b.seen is True
    assert c.seen is False


def test_mark_seen_is_idempotent_and_bumps_activity(store, clock):
    session = store.get_or_create("client-a")
    store.append_message(session, "client", "hello")
    store.mark_seen(session)
    clock.advance(minutes=1)

    assert store.mark_seen(session) == 0
    assert session.last_activity == clock.now


def test_last_activity_never_moves_backwards(store, clock):
    session = store.get_or_create("client-a")
    clock.advance(minutes=2)
    store.append_message(session, "client", "later")
    latest = session.last_activity

    clock.now -= 60_000
    store.append_message(session, "admin", "clock went back")

    assert session.last_activity == latest


def test_delete_returns_removed_session(store):
    session = store.get_or_create("client-a")

    assert store.delete(session.id) is session
    assert session.id not in store
    assert store.delete(session.id) is None


def test_recreate_after_delete_gets_new_id(store):
    old = store.get_or_create("client-a")
    store.delete(old.id)

    new = store.get_or_create("client-a")

    assert new.id != old.id
    assert new.messages == []


def test_idle_sessions(store, clock):
    stale = store.get_or_create("stale")
    clock.advance(minutes=11)
    fresh = store.get_or_create("fresh")

    idle = store.idle_sessions(10 * 60_000)

    assert idle == [stale]
    assert fresh not in idle


def test_clear(store):
    store.get_or_create("a")
    store.get_or_create("b")

    store.clear()

    assert len(store) == 0
    assert store.list_all() == []


def test_summary_unread_flag(store):
    session = store.get_or_create("client-a")
    assert summarize(session).unread is False
    assert summarize(session).last_message is None

    store.append_message(session, "client", "help")
    assert summarize(session).unread is True

    store.append_message(session, "admin", "on it")
    summary = summarize(session)
    assert summary.unread is True
    assert summary.last_message.text == "on it"

    store.mark_seen(session)
    assert summarize(session).unread is False


def test_admin_message_does_not_change_unread(store):
    session = store.get_or_create("client-a")
    store.append_message(session, "admin", "hello?")

    assert summarize(session).unread is False


def test_wire_format_uses_camel_case(store):
    session = store.get_or_create("client-a")
    store.append_message(session, "client", "hi")

    wire = to_wire(session)
    summary = to_wire(summarize(session))

    assert set(wire) == {"id", "clientId", "messages", "createdAt", "lastActivity"}
    assert wire["messages"][0]["from"] == "client"
    assert set(wire["messages"][0]) == {"id", "from", "text", "time", "seen"}
    assert set(summary) == {"id", "clientId", "createdAt", "lastActivity", "lastMessage", "unread"}
    assert summary["lastMessage"]["text"] == "hi"
