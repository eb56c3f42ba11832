import requests

from travel_chatbot.client.api import TravelChatClient
from travel_chatbot.client.sse import FrameDecodeError
from travel_chatbot.client.stream_consumer import UNEXPECTED_END, ChatStreamConsumer


class FakeClient:
    def __init__(self, payloads, transcript=None, raise_after=None, failed_fetches=0):
        self.payloads = payloads
        self.transcript = transcript
        self.raise_after = raise_after
        self.failed_fetches = failed_fetches
        self.fetches = 0

    def stream_message(self, conversation_id, content):
        for payload in self.payloads:
            yield payload
        if self.raise_after is not None:
            raise self.raise_after

    def get_conversation(self, conversation_id):
        self.fetches += 1
        if self.fetches <= self.failed_fetches:
            raise requests.ConnectionError("refresh dropped")
        return self.transcript


def recorder():
    seen = []

    def on_update(consumer):
        seen.append((consumer.is_streaming, consumer.live_text))

    return seen, on_update


def test_greeting_live_text_transitions_and_reconciles():
    transcript = {"id": 1, "messages": [{"role": "assistant", "content": "Hi there!"}]}
    client = FakeClient([{"content": "Hi"}, {"content": " there!"}, {"done": True}], transcript)
    seen, on_update = recorder()

    consumer = ChatStreamConsumer(client, 1, on_update=on_update)
    assert consumer.send("") is True

    assert seen == [(True, ""), (True, "Hi"), (True, "Hi there!"), (False, "")]
    assert client.fetches == 1
    assert consumer.transcript == transcript
    # the saved reply renders exactly like the last live text
    assert consumer.transcript["messages"][-1]["content"] == seen[-2][1]
    assert consumer.failed is False


def test_live_text_is_concatenation_in_arrival_order():
    fragments = ["Ta", "ke the", " RER", " B", " 🚆"]
    client = FakeClient([{"content": f} for f in fragments] + [{"done": True}], {"messages": []})
    seen, on_update = recorder()

    ChatStreamConsumer(client, 1, on_update=on_update).send("How do I get there?")

    assert seen[-2] == (True, "".join(fragments))


def test_error_frame_clears_without_refetch():
    client = FakeClient([{"content": "Sure"}, {"error": "Failed to send message"}])
    seen, on_update = recorder()

    consumer = ChatStreamConsumer(client, 1, on_update=on_update)
    assert consumer.send("Plan Paris") is False

    assert client.fetches == 0
    assert consumer.failed is True
    assert consumer.error == "Failed to send message"
    assert consumer.transcript is None
    assert seen[-1] == (False, "")


def test_transport_failure_counts_as_error():
    client = FakeClient([{"content": "Sure"}], raise_after=requests.ConnectionError("reset"))

    consumer = ChatStreamConsumer(client, 1)
    assert consumer.send("Plan Paris") is False
    assert consumer.failed is True
    assert consumer.is_streaming is False
    assert consumer.live_text == ""
    assert client.fetches == 0


def test_malformed_frame_counts_as_error():
    client = FakeClient([], raise_after=FrameDecodeError("bad"))

    consumer = ChatStreamConsumer(client, 1)
    assert consumer.send("") is False
    assert consumer.failed is True


def test_stream_ending_without_terminal_frame_is_error():
    client = FakeClient([{"content": "Half an ans"}])

    consumer = ChatStreamConsumer(client, 1)
    assert consumer.send("") is False
    assert consumer.error == UNEXPECTED_END
    assert client.fetches == 0


class FakeResponse:
    def __init__(self, body: bytes = b"", payload=None, chunk_size=3):
        self.body = body
        self.payload = payload
        self.chunk_size = chunk_size

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        pass

    def iter_content(self, chunk_size=None):
        for i in range(0, len(self.body), self.chunk_size):
            yield self.body[i:i + self.chunk_size]

    def json(self):
        return self.payload


class FakeSession:
    """Stands in for ``requests.Session``; streams ``body`` in tiny byte slices."""

    def __init__(self, body: bytes, transcript):
        self.body = body
        self.transcript = transcript
        self.posted = []

    def post(self, url, headers=None, json=None, stream=False, timeout=None):
        self.posted.append((url, json, stream))
        return FakeResponse(self.body)

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        return FakeResponse(payload=self.transcript)


def test_real_client_reassembles_frames_split_across_chunks():
    body = (
        'data: {"content": "Hi"}\n\n'
        'data: {"content": " there!"}\n\n'
        'data: {"done": true}\n\n'
    ).encode()
    transcript = {"id": 7, "messages": [{"role": "assistant", "content": "Hi there!"}]}
    session = FakeSession(body, transcript)
    client = TravelChatClient("http://api.test/api", token="t", session=session)
    live_texts = []

    consumer = ChatStreamConsumer(client, 7, on_update=lambda c: live_texts.append(c.live_text))
    assert consumer.send("") is True

    assert live_texts == ["", "Hi", "Hi there!", ""]
    assert session.posted == [("http://api.test/api/conversations/7/messages", {"content": ""}, True)]
    assert consumer.transcript == transcript


def test_saved_reply_with_failed_refresh_is_not_a_failure():
    transcript = {"id": 1, "messages": [{"role": "assistant", "content": "Bonjour"}]}
    client = FakeClient([{"content": "Bonjour"}, {"done": True}], transcript, failed_fetches=1)

    consumer = ChatStreamConsumer(client, 1)
    assert consumer.send("") is True

    assert consumer.failed is False
    assert consumer.needs_refresh is True
    assert consumer.transcript is None

    assert consumer.refresh() is True
    assert consumer.needs_refresh is False
    assert consumer.error is None
    assert consumer.transcript == transcript
    assert client.fetches == 2
