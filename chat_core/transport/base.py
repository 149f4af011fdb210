"""ChatTransport 抽象接口。

ConversationController 不直接依赖 HTTP 库，而是依赖此协议：

- send(user_id, session_id, message): 执行一次问答请求，返回 answer 文本。
- 失败时抛出 TransportError（network / protocol / malformed）。

控制器保证同一会话内不会并发调用 send，实现方无需自行加锁。
"""

from typing import Protocol


class ChatTransport(Protocol):
    """问答接口客户端协议。

    实现者需要提供：
    - name: 传输实现名称，用于日志。
    - send: 发送一条用户消息并返回回答文本。
    - check_health: 探测接口是否可达。
    """

    name: str

    async def send(self, user_id: str, session_id: str, message: str) -> str:
        ...

    async def check_health(self) -> bool:
        ...
