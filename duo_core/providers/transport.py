"""基于 httpx 的 HTTP 传输层。

传输层只负责开连接、把原始字节推给 StreamSession、在结束时发出完成信号；
分行、解析、累积都由会话完成。错误码映射与各 Provider 客户端保持一致：

- httpx.RequestError → NetworkError
- 429 → RateLimitError
- 其他 >= 400 → ApiError
- 200 但响应体不是 JSON → ApiError(INVALID_RESPONSE)
- URL 配置错误 → ValidationError(INVALID_URL)
"""

from typing import Any, Dict, Optional

import httpx

from duo_core.domain.exceptions import (
    ApiError,
    BusinessError,
    NetworkError,
    RateLimitError,
    TransportError,
    ValidationError,
)
from duo_core.streaming.session import StreamSession


class HttpxTransport:
    """同步 httpx 传输实现。"""

    def __init__(self, provider: str, timeout: float = 30.0):
        self._provider = provider
        self._timeout = timeout

    def stream_into(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Dict[str, str],
        session: StreamSession,
    ) -> None:
        """POST 流式请求，把响应分片逐个交给 session，结束后调用 session.finish。"""

        error: Optional[BusinessError] = None
        try:
            with httpx.Client(timeout=self._timeout, trust_env=False) as client:
                with client.stream("POST", url, json=payload, headers=headers) as resp:
                    if resp.status_code >= 400:
                        resp.read()
                        error = self._status_error(resp.status_code, resp.text)
                    else:
                        for data in resp.iter_bytes():
                            if not session.is_active:
                                # 会话已取消：不再读取，直接关闭连接
                                break
                            session.on_chunk(data)
        except httpx.RequestError as e:
            error = NetworkError(code="NETWORK_ERROR", message=str(e), provider=self._provider)
        except httpx.StreamError as e:
            error = NetworkError(code="STREAM_ERROR", message=str(e), provider=self._provider)
        except httpx.InvalidURL as e:
            error = _invalid_url(url, e)
        session.finish(error)

    def post_json(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
        """非流式 POST，返回响应 JSON；错误以异常形式抛出。"""

        try:
            with httpx.Client(timeout=self._timeout, trust_env=False) as client:
                resp = client.post(url, json=payload, headers=headers)
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), provider=self._provider)
        except httpx.InvalidURL as e:
            raise _invalid_url(url, e)
        if resp.status_code >= 400:
            raise self._status_error(resp.status_code, resp.text)
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(
                code="INVALID_RESPONSE",
                message=f"响应不是合法 JSON: {e}",
                http_status=502,
                provider=self._provider,
            )

    def _status_error(self, status_code: int, body: str) -> TransportError:
        if status_code == 429:
            return RateLimitError(
                code="RATE_LIMIT",
                message=f"{self._provider} rate limit",
                http_status=429,
                provider=self._provider,
            )
        return ApiError(code="API_ERROR", message=body, http_status=status_code, provider=self._provider)


def _invalid_url(url: str, exc: Exception) -> ValidationError:
    # 配置的 base_url 写错时在开连接前就会失败
    return ValidationError(code="INVALID_URL", message=f"{url}: {exc}")
