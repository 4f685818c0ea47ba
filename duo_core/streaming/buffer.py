"""分片缓冲区。

网络层按任意边界交付字节：一个 JSON 对象可能被拆到两次读取里，
一个多字节 UTF-8 字符也可能被拆开。ChunkBuffer 负责把这些分片
拼回完整的文本行，未结束的尾部留到下一个分片再处理。

先按 b"\\n" 切分再逐行解码：UTF-8 多字节序列里不会出现 0x0A，
被拆开的字符只可能落在尾部，而某一行里的非法字节也不会拖住后面的行。
"""

from typing import List, Union

Line = Union[str, bytes]


class ChunkBuffer:
    """累积原始字节，并按行取出已经完整的部分。"""

    def __init__(self) -> None:
        self._data = bytearray()

    @property
    def pending(self) -> int:
        """当前缓冲的字节数。"""

        return len(self._data)

    def append(self, chunk: Union[bytes, bytearray, str]) -> None:
        if not chunk:
            return
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        self._data.extend(chunk)

    def drain_complete_lines(self, is_final: bool = False) -> List[Line]:
        """取出完整的行。

        - 非最终：最后一段（可能是半行或半个字符）继续留在缓冲区。
        - 最终：所有分段都作为完整行返回，缓冲区清空；结尾被截断的
          多字节字符直接丢弃。
        - 无法按 UTF-8 解码的行原样以 bytes 返回，由解析器记为 malformed。
        """

        if not self._data:
            return []
        segments = bytes(self._data).split(b"\n")
        if is_final:
            self._data.clear()
            tail = _decode_final_tail(segments.pop())
            return [_decode_line(seg) for seg in segments] + [tail]

        self._data = bytearray(segments.pop())
        return [_decode_line(seg) for seg in segments]

    def clear(self) -> None:
        self._data.clear()


def _decode_line(raw: bytes) -> Line:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw


def _decode_final_tail(raw: bytes) -> Line:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        if exc.reason == "unexpected end of data":
            # 连接关闭时最后一个字符只到了一半
            return raw[: exc.start].decode("utf-8")
        return raw
