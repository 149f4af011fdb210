"""Chat Core 顶层包。

该包提供问答聊天客户端的核心实现，
包括配置加载、领域模型、会话管理、对话编排与 HTTP 传输。
"""

from chat_core.conversation import ConversationController, DraftInput
from chat_core.session import SessionManager

__all__ = ["ConversationController", "DraftInput", "SessionManager"]
