import json

from conftest import auth_headers
from travel_chatbot.chat.events import ContentEvent, DoneEvent, ErrorEvent
from travel_chatbot.db.chat_store import chat_store
from travel_chatbot.exceptions import CorruptMessageError


def parse_frames(body: str) -> list[dict]:
    return [
        json.loads(frame[len("data: "):])
        for frame in body.split("\n\n")
        if frame.startswith("data: ")
    ]


def create_conversation(api_client, user, title="Trip"):
    response = api_client.post("/api/conversations", json={"title": title}, headers=auth_headers(user))
    assert response.status_code == 201
    return response.json()


def test_requires_bearer_token(api_client):
    assert api_client.get("/api/conversations").status_code == 401
    response = api_client.get("/api/conversations", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401


def test_conversation_crud(api_client, user_a):
    conv = create_conversation(api_client, user_a, "Rome")
    assert conv["title"] == "Rome"

    listed = api_client.get("/api/conversations", headers=auth_headers(user_a)).json()
    assert [c["id"] for c in listed] == [conv["id"]]

    detail = api_client.get(f"/api/conversations/{conv['id']}", headers=auth_headers(user_a)).json()
    assert detail["messages"] == []

    response = api_client.delete(f"/api/conversations/{conv['id']}", headers=auth_headers(user_a))
    assert response.status_code == 204
    assert api_client.get(f"/api/conversations/{conv['id']}", headers=auth_headers(user_a)).status_code == 404


def test_untitled_conversation_gets_default_title(api_client, user_a):
    response = api_client.post("/api/conversations", json={}, headers=auth_headers(user_a))
    assert response.json()["title"] == "New Chat"


def test_foreign_conversation_looks_missing(api_client, user_a, user_b, proxy):
    conv = create_conversation(api_client, user_a)
    missing = api_client.get("/api/conversations/9999", headers=auth_headers(user_b))
    foreign = api_client.get(f"/api/conversations/{conv['id']}", headers=auth_headers(user_b))

    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()

    response = api_client.post(
        f"/api/conversations/{conv['id']}/messages",
        json={"content": "hello"},
        headers=auth_headers(user_b),
    )
    assert response.status_code == 404
    assert api_client.delete(f"/api/conversations/{conv['id']}", headers=auth_headers(user_b)).status_code == 404
    assert proxy.calls == []


def test_greeting_turn_streams_and_persists(api_client, user_a, proxy):
    proxy.events = [ContentEvent(text="Hi"), ContentEvent(text=" there!"), DoneEvent()]
    conv = create_conversation(api_client, user_a)

    response = api_client.post(
        f"/api/conversations/{conv['id']}/messages",
        json={"content": ""},
        headers=auth_headers(user_a),
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert parse_frames(response.text) == [
        {"content": "Hi"},
        {"content": " there!"},
        {"done": True},
    ]

    detail = api_client.get(f"/api/conversations/{conv['id']}", headers=auth_headers(user_a)).json()
    assert [(m["role"], m["content"]) for m in detail["messages"]] == [("assistant", "Hi there!")]


def test_failed_turn_keeps_user_message_only(api_client, user_a, proxy):
    proxy.events = [ContentEvent(text="Sure"), ErrorEvent(message="upstream timeout")]
    conv = create_conversation(api_client, user_a)

    response = api_client.post(
        f"/api/conversations/{conv['id']}/messages",
        json={"content": "Plan Paris"},
        headers=auth_headers(user_a),
    )

    frames = parse_frames(response.text)
    assert frames[0] == {"content": "Sure"}
    assert "error" in frames[-1]
    assert not any(f.get("done") for f in frames)

    detail = api_client.get(f"/api/conversations/{conv['id']}", headers=auth_headers(user_a)).json()
    assert [(m["role"], m["content"]) for m in detail["messages"]] == [("user", "Plan Paris")]


def test_follow_up_turn_sends_whole_history(api_client, user_a, proxy):
    conv = create_conversation(api_client, user_a)
    headers = auth_headers(user_a)

    proxy.events = [ContentEvent(text="Where to?"), DoneEvent()]
    api_client.post(f"/api/conversations/{conv['id']}/messages", json={"content": ""}, headers=headers)
    proxy.events = [ContentEvent(text="Paris it is."), DoneEvent()]
    api_client.post(f"/api/conversations/{conv['id']}/messages", json={"content": "Paris"}, headers=headers)

    last_context = proxy.calls[-1]
    assert [m.content for m in last_context[1:]] == ["Where to?", "Paris"]

    detail = api_client.get(f"/api/conversations/{conv['id']}", headers=headers).json()
    assert [m["content"] for m in detail["messages"]] == ["Where to?", "Paris", "Paris it is."]


def test_unexpected_failure_before_stream_is_500(api_client, user_a, proxy, monkeypatch):
    conv = create_conversation(api_client, user_a)

    def corrupt_history(conversation_id):
        raise CorruptMessageError(f"Unknown role 'narrator' in conversation {conversation_id}")

    monkeypatch.setattr(chat_store, "list_messages", corrupt_history)
    response = api_client.post(
        f"/api/conversations/{conv['id']}/messages",
        json={"content": ""},
        headers=auth_headers(user_a),
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to process streaming request"
    assert proxy.calls == []
