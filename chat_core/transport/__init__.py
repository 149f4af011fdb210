"""问答接口传输层。

该包下的模块负责：
- 定义传输抽象接口 (base)。
- 提供基于 httpx 的具体实现 (http_client)。
"""

from chat_core.config.settings import settings
from chat_core.transport.base import ChatTransport
from chat_core.transport.http_client import HttpChatTransport


def create_transport() -> ChatTransport:
    """按当前配置创建默认传输实例。"""

    return HttpChatTransport(settings)


__all__ = ["ChatTransport", "HttpChatTransport", "create_transport"]
