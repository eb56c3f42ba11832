import pytest

from travel_chatbot.chat.events import ContentEvent, DoneEvent, ErrorEvent, to_sse_frame
from travel_chatbot.client.sse import FrameDecodeError, SSEFrameDecoder


def test_server_frames_match_wire_format():
    assert to_sse_frame(ContentEvent(text="Hi")) == 'data: {"content": "Hi"}\n\n'
    assert to_sse_frame(DoneEvent()) == 'data: {"done": true}\n\n'
    assert to_sse_frame(ErrorEvent(message="boom")) == 'data: {"error": "boom"}\n\n'


def test_many_frames_in_one_read():
    decoder = SSEFrameDecoder()
    payloads = decoder.feed('data: {"content": "Hi"}\n\ndata: {"content": " there"}\n\ndata: {"done": true}\n\n')
    assert payloads == [{"content": "Hi"}, {"content": " there"}, {"done": True}]
    assert decoder.pending == ""


def test_frame_split_across_reads():
    decoder = SSEFrameDecoder()
    assert decoder.feed('data: {"cont') == []
    assert decoder.feed('ent": "Paris"}\n') == []
    assert decoder.feed('\ndata: {"done"') == [{"content": "Paris"}]
    assert decoder.feed(": true}\n\n") == [{"done": True}]


def test_multibyte_character_split_across_reads():
    # json.dumps escapes non-ascii by default, so build the frame by hand
    raw = 'data: {"content": "Sacré-Cœur"}\n\n'.encode("utf-8")
    cut = raw.index("é".encode("utf-8")) + 1

    decoder = SSEFrameDecoder()
    assert decoder.feed(raw[:cut]) == []
    assert decoder.feed(raw[cut:]) == [{"content": "Sacré-Cœur"}]


def test_non_data_lines_and_done_marker_ignored():
    decoder = SSEFrameDecoder()
    assert decoder.feed(": keep-alive\n\nevent: ping\n\ndata: [DONE]\n\n") == []


def test_crlf_separators():
    decoder = SSEFrameDecoder()
    assert decoder.feed('data: {"content": "a"}\r\n\r\n') == [{"content": "a"}]


def test_malformed_complete_frame_raises():
    decoder = SSEFrameDecoder()
    with pytest.raises(FrameDecodeError):
        decoder.feed("data: {not json\n\n")
