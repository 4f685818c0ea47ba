from duo_core.speech.recognition import TranscriptCollector
from duo_core.speech.tts import SpeechQueue, normalize_for_speech, split_sentences


class FakeSynth:
    def __init__(self):
        self.spoken = []
        self.stopped = 0

    def speak(self, text):
        self.spoken.append(text)

    def stop(self):
        self.stopped += 1


def test_normalize_for_speech():
    assert normalize_for_speech("你好，朵朵！") == "你好, 朵朵。"
    assert normalize_for_speech("《小猪佩奇》（动画）") == "小猪佩奇动画"
    assert normalize_for_speech("注意：小心——烫") == "注意: 小心, 烫"
    assert normalize_for_speech("a,b  c") == "a, b c"
    assert normalize_for_speech("真的吗?") == "真的吗。"


def test_split_sentences():
    assert split_sentences("你好！") == ["你好！"]
    assert split_sentences("今天天气很好。我们去公园吧！好吗") == ["今天天气很好。", "我们去公园吧！", "好吗"]
    assert split_sentences("第一行\n第二行") == ["第一行\n", "第二行"]


def test_speak_addition_queues_in_arrival_order():
    synth = FakeSynth()
    q = SpeechQueue(synth)
    q.speak_addition("从前有座山。山里有座庙。")
    q.speak_addition("庙里")
    assert synth.spoken == ["从前有座山。"]
    assert q.pending == ["山里有座庙。", "庙里"]

    q.on_utterance_finished()
    q.on_utterance_finished()
    q.on_utterance_finished()
    assert synth.spoken == ["从前有座山。", "山里有座庙。", "庙里"]
    assert q.is_speaking is False
    assert q.accumulated_text == "从前有座山。山里有座庙。庙里"


def test_empty_addition_is_not_spoken():
    synth = FakeSynth()
    q = SpeechQueue(synth)
    q.speak_addition("")
    assert synth.spoken == []


def test_speak_replaces_current_speech():
    synth = FakeSynth()
    q = SpeechQueue(synth)
    done = []
    q.speak_addition("一二三四五六。七八九十。")
    q.speak("新的话！", on_done=lambda: done.append(True))
    assert synth.stopped == 1
    assert q.pending == []
    assert synth.spoken[-1] == "新的话。"
    q.on_utterance_finished()
    assert done == [True]


def test_reset_when_idle_does_not_stop_engine():
    synth = FakeSynth()
    q = SpeechQueue(synth)
    q.reset()
    assert synth.stopped == 0


def test_transcript_collector_forwards_final_only():
    finals = []
    c = TranscriptCollector(finals.append)
    c.on_transcript("讲", is_final=False)
    c.on_transcript("讲个", is_final=False)
    assert c.partial == "讲个"
    assert finals == []
    c.on_transcript(" 讲个故事 ", is_final=True)
    assert finals == ["讲个故事"]
    assert c.partial == ""
    c.on_transcript("   ", is_final=True)
    c.on_transcript(None, is_final=True)
    assert finals == ["讲个故事"]
