import json
import tempfile
from datetime import date

from duo_core.agents.app_launcher import AppLauncher
from duo_core.agents.assistant import FRIENDLY_ERROR_MESSAGE, DuoAssistant
from duo_core.agents.chat_service import ChatService
from duo_core.domain.conversation import ConversationHistory
from duo_core.domain.exceptions import ConversationError, NetworkError
from duo_core.infrastructure.storage.json_store import JsonStarStore
from duo_core.speech.tts import SpeechQueue
from duo_core.streaming import SSE_CHAT_PROFILE


class FakeProvider:
    name = "fake"
    profile = SSE_CHAT_PROFILE

    def __init__(self, replies, error=None):
        self.replies = replies
        self.error = error
        self.calls = 0

    def stream(self, turns, session):
        self.calls += 1
        for piece in self.replies:
            body = json.dumps({"choices": [{"delta": {"content": piece}}]}, ensure_ascii=False)
            session.on_chunk(f"data: {body}\n".encode("utf-8"))
        session.finish(self.error)

    def chat(self, turns):
        return "".join(self.replies)


class Sink:
    def __init__(self):
        self.user = []
        self.ai = []

    def add_user_message(self, text):
        self.user.append(text)

    def add_or_update_ai_message(self, text):
        self.ai.append(text)


class Synth:
    def __init__(self):
        self.spoken = []

    def speak(self, text):
        self.spoken.append(text)

    def stop(self):
        pass


class Opener:
    def __init__(self, installed=()):
        self.installed = set(installed)
        self.opened = []

    def can_open(self, url):
        return url in self.installed

    def open(self, url):
        self.opened.append(url)


class Uploader:
    def __init__(self, fail=False):
        self.current_conversation_id = None
        self.fail = fail
        self.created = []
        self.messages = []

    def create_conversation(self, title, llm_model="defaultModel"):
        if self.fail:
            raise ConversationError(code="INVALID_RESPONSE", message="down")
        self.created.append(title)
        self.current_conversation_id = 1
        return 1

    def add_user_message(self, content):
        self.messages.append(("user", content))

    def add_ai_message(self, content):
        self.messages.append(("assistant", content))


def _assistant(d, provider, opener=None, uploader=None):
    sink, synth = Sink(), Synth()
    chat = ChatService(provider, history=ConversationHistory(), system_prompt="你是朵朵")
    assistant = DuoAssistant(
        chat=chat,
        stars=JsonStarStore(root=d),
        launcher=AppLauncher(opener or Opener()),
        speech=SpeechQueue(synth),
        sink=sink,
        uploader=uploader,
    )
    return assistant, sink, synth


def test_chat_reply_goes_to_sink_speech_and_upload():
    with tempfile.TemporaryDirectory() as d:
        provider = FakeProvider(["你好呀！", "我是朵朵。"])
        uploader = Uploader()
        assistant, sink, synth = _assistant(d, provider, uploader=uploader)

        text = "你好，我想听一个非常非常非常长的故事好不好呀"
        session = assistant.process_command(text)

        assert session.text == "你好呀！我是朵朵。"
        assert sink.user == [text]
        assert sink.ai == ["你好呀！", "我是朵朵。"]
        assert synth.spoken == ["你好呀。"]
        assert uploader.created == [text[:20]]
        assert len(uploader.created[0]) == 20
        assert uploader.messages == [
            ("user", text),
            ("assistant", "你好呀！我是朵朵。"),
        ]


def test_star_command_is_answered_locally():
    with tempfile.TemporaryDirectory() as d:
        provider = FakeProvider(["不该调用"])
        assistant, sink, _ = _assistant(d, provider)
        assert assistant.process_command("给我加一颗星星") is None
        assert sink.ai == ["已经帮你增加了1颗星星！"]
        assert provider.calls == 0
        assert JsonStarStore(root=d).get(date.today()) == 1


def test_launched_app_skips_chat():
    with tempfile.TemporaryDirectory() as d:
        provider = FakeProvider(["不该调用"])
        opener = Opener({"qqmusic://"})
        assistant, sink, _ = _assistant(d, provider, opener=opener)
        assert assistant.process_command("打开QQ音乐") is None
        assert sink.ai == ["正在为您打开QQ音乐..."]
        assert opener.opened == ["qqmusic://"]
        assert provider.calls == 0


def test_missing_app_falls_through_to_chat():
    with tempfile.TemporaryDirectory() as d:
        provider = FakeProvider(["好的"])
        assistant, sink, _ = _assistant(d, provider)
        assistant.process_command("打开网易云音乐")
        assert sink.ai == ["您似乎没有安装网易云音乐，请先安装该应用。", "好的"]
        assert provider.calls == 1


def test_chat_failure_shows_friendly_message():
    with tempfile.TemporaryDirectory() as d:
        provider = FakeProvider([], error=NetworkError(code="NETWORK_ERROR", message="refused"))
        uploader = Uploader()
        assistant, sink, _ = _assistant(d, provider, uploader=uploader)
        assistant.process_command("讲个故事")
        assert sink.ai == [FRIENDLY_ERROR_MESSAGE]
        assert uploader.messages == [("user", "讲个故事")]


def test_upload_failure_does_not_block_chat():
    with tempfile.TemporaryDirectory() as d:
        provider = FakeProvider(["嗯"])
        assistant, sink, _ = _assistant(d, provider, uploader=Uploader(fail=True))
        session = assistant.process_command("讲个故事")
        assert session.text == "嗯"
        assert sink.ai == ["嗯"]


def test_final_transcription_ignores_blank_text():
    with tempfile.TemporaryDirectory() as d:
        provider = FakeProvider(["嗯"])
        assistant, sink, _ = _assistant(d, provider)
        assert assistant.on_final_transcription("   ") is None
        assert sink.user == []
        assistant.on_final_transcription(" 你好 ")
        assert sink.user == ["你好"]
        assert provider.calls == 1
