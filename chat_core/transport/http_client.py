"""基于 HTTP 的问答接口适配器。

请求格式：
- POST {chatbot_api_url}
- Content-Type: application/x-www-form-urlencoded
- 字段: question / session_id / user_id

成功响应为 JSON，回答位于 answer 字段。
"""

from typing import Any

import httpx

from chat_core.config.settings import settings
from chat_core.domain.exceptions import ApiError, MalformedResponseError, NetworkError


class HttpChatTransport:
    """问答接口的 HTTP 客户端实现。"""

    name = "http"

    def __init__(self, cfg=settings):
        self._settings = cfg

    @property
    def endpoint(self) -> str:
        return self._settings.chatbot_api_url

    async def send(self, user_id: str, session_id: str, message: str) -> str:
        """执行一次问答请求。

        步骤：
        1. 构造表单字段。
        2. 发送请求，网络异常包装为 NetworkError。
        3. 非 2xx 状态码包装为 ApiError，detail 中保留状态码与响应体。
        4. 解析 JSON 并取出 answer，缺失时抛出 MalformedResponseError。
        """

        form = {
            "question": message,
            "session_id": session_id,
            "user_id": user_id,
        }
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = await client.post(
                    self.endpoint,
                    data=form,
                    headers={"accept": "application/json"},
                )
        except httpx.RequestError as e:
            # DNS 失败、连接被拒、超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__)
        if not resp.is_success:
            raise ApiError(
                code="API_ERROR",
                message=f"HTTP error! status: {resp.status_code}",
                detail=f"status={resp.status_code} body={resp.text}",
                http_status=resp.status_code,
            )
        return self._parse_answer(resp)

    async def check_health(self) -> bool:
        """用 HEAD 请求探测接口是否可达。"""

        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = await client.head(self.endpoint)
        except httpx.HTTPError:
            return False
        return resp.is_success

    @staticmethod
    def _parse_answer(resp: httpx.Response) -> str:
        try:
            data: Any = resp.json()
        except ValueError as e:
            raise MalformedResponseError(
                code="MALFORMED_RESPONSE",
                message="Response body is not valid JSON",
                detail=f"{e}; body={resp.text[:500]}",
            )
        answer = data.get("answer") if isinstance(data, dict) else None
        if not isinstance(answer, str) or not answer.strip():
            raise MalformedResponseError(
                code="MALFORMED_RESPONSE",
                message="No answer received from API",
                detail=f"body={resp.text[:500]}",
            )
        return answer
