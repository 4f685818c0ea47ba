from duo_core.streaming import (
    OLLAMA_GENERATE_PROFILE,
    SSE_CHAT_PROFILE,
    classify,
    extract_delta,
    extract_reply,
)


def test_classify_sse_delta():
    ev = classify('data: {"choices":[{"delta":{"content":"Hel"}}]}', SSE_CHAT_PROFILE)
    assert ev.kind == "delta"
    assert ev.text == "Hel"


def test_classify_sse_done_and_ignorable():
    assert classify("data: [DONE]", SSE_CHAT_PROFILE).kind == "done"
    assert classify("", SSE_CHAT_PROFILE).kind == "ignorable"
    assert classify(": keep-alive", SSE_CHAT_PROFILE).kind == "ignorable"
    assert classify("event: message", SSE_CHAT_PROFILE).kind == "ignorable"


def test_classify_strips_carriage_return():
    ev = classify('data: {"choices":[{"delta":{"content":"x"}}]}\r', SSE_CHAT_PROFILE)
    assert ev.kind == "delta"
    assert ev.text == "x"
    assert classify("data: [DONE]\r", SSE_CHAT_PROFILE).kind == "done"


def test_classify_malformed_keeps_raw_line():
    ev = classify("data: {not json", SSE_CHAT_PROFILE)
    assert ev.kind == "malformed"
    assert ev.raw_line == "data: {not json"


def test_classify_event_without_content_is_ignorable():
    # 首个事件通常只有 role
    ev = classify('data: {"choices":[{"delta":{"role":"assistant"}}]}', SSE_CHAT_PROFILE)
    assert ev.kind == "ignorable"
    assert classify('data: {"choices":[]}', SSE_CHAT_PROFILE).kind == "ignorable"
    assert classify('data: {"choices":[{"delta":{"content":null}}]}', SSE_CHAT_PROFILE).kind == "ignorable"


def test_classify_empty_string_delta_is_kept():
    ev = classify('data: {"choices":[{"delta":{"content":""}}]}', SSE_CHAT_PROFILE)
    assert ev.kind == "delta"
    assert ev.text == ""


def test_classify_ollama_lines():
    ev = classify('{"model":"qwen2.5:7b","response":"你","done":false}', OLLAMA_GENERATE_PROFILE)
    assert ev.kind == "delta"
    assert ev.text == "你"
    assert classify("   ", OLLAMA_GENERATE_PROFILE).kind == "ignorable"
    assert classify("{oops", OLLAMA_GENERATE_PROFILE).kind == "malformed"
    # 行模式没有哨兵
    assert classify("[DONE]", OLLAMA_GENERATE_PROFILE).kind == "malformed"


def test_extract_delta_tolerates_wrong_shapes():
    assert extract_delta({"choices": "nope"}, SSE_CHAT_PROFILE) is None
    assert extract_delta({"choices": [{"delta": {"content": 3}}]}, SSE_CHAT_PROFILE) is None
    assert extract_delta([1, 2], SSE_CHAT_PROFILE) is None
    assert extract_delta("text", SSE_CHAT_PROFILE) is None
    assert extract_delta({"response": "ok"}, OLLAMA_GENERATE_PROFILE) == "ok"


def test_extract_reply_uses_message_path():
    data = {"choices": [{"message": {"role": "assistant", "content": "完整回复"}}]}
    assert extract_reply(data, SSE_CHAT_PROFILE) == "完整回复"
    assert extract_reply({"choices": []}, SSE_CHAT_PROFILE) is None


def test_classify_undecodable_bytes_is_malformed():
    ev = classify(b"data: \xff", SSE_CHAT_PROFILE)
    assert ev.kind == "malformed"
    assert ev.raw_line == "data: \\xff"
