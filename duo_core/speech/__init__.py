"""语音相关协作者：语音合成朗读队列与语音识别结果收集。

具体的 TTS / ASR 引擎由宿主平台提供，这里只定义接口和调度逻辑。
"""
