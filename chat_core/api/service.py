"""对外 API 服务模块。

提供简化的同步函数接口供上层应用（命令行、脚本等）调用，
内部持有一个默认的 ConversationController 单例。
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from chat_core.conversation.controller import ConversationController
from chat_core.domain.models import AttachmentRef, Message, Session
from chat_core.infrastructure.logging.logger import logger
from chat_core.transport import create_transport


_controller: Optional[ConversationController] = None


def get_default_controller() -> ConversationController:
    """获取默认的对话控制器实例（单例）。"""
    global _controller
    if _controller is None:
        _controller = ConversationController(transport=create_transport())
    return _controller


def start_session(user_id: str, session_id: Optional[str] = None) -> Dict[str, Any]:
    """开始新会话。

    Args:
        user_id: 用户名或编号
        session_id: 会话ID（可选，不提供则自动生成）

    Returns:
        包含 user_id、session_id 和 short_id 的字典

    Raises:
        ValidationError: user_id 为空
    """
    session = get_default_controller().start(user_id, session_id)
    return _session_to_dict(session)


def send_message(text: str, attachments: Iterable[AttachmentRef] = ()) -> Dict[str, Any]:
    """发送一条消息并等待本轮结束。

    不能在已运行的事件循环中调用；异步代码请直接使用 ConversationController.submit。

    Returns:
        包含 accepted 标志与最新状态的字典
    """
    controller = get_default_controller()
    accepted = _run_sync("send_message", lambda: controller.submit(text, attachments))
    state = get_state()
    state["accepted"] = accepted
    return state


def reset_session() -> None:
    get_default_controller().reset()


def get_state() -> Dict[str, Any]:
    """获取当前会话与消息历史。"""
    snap = get_default_controller().snapshot()
    return {
        "session": _session_to_dict(snap.session) if snap.session else None,
        "messages": [_message_to_dict(m) for m in snap.messages],
        "pending": snap.pending,
    }


def check_endpoint_health() -> bool:
    """探测问答接口是否可达。"""
    transport = get_default_controller().transport
    return _run_sync("check_endpoint_health", transport.check_health)


def _run_sync(name: str, make_coro: Callable[[], Awaitable[Any]]) -> Any:
    """在无事件循环的线程里同步执行协程。

    先检查是否已有运行中的事件循环，再创建协程，避免留下从未 await 的协程对象。
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(make_coro())
    message = f"{name}() cannot be called from a running event loop"
    logger.error(message, extra={"extra": {"function": name}})
    raise RuntimeError(message)


def _session_to_dict(session: Session) -> Dict[str, Any]:
    return {
        "user_id": session.user_id,
        "session_id": session.session_id,
        "short_id": session.short_id,
        "created_at": session.created_at.isoformat(),
    }


def _message_to_dict(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "content": message.content,
        "sender": message.sender,
        "timestamp": message.timestamp.isoformat(),
        "is_error": message.is_error,
        "attachments": [
            {"name": a.name, "mime_type": a.mime_type, "size_bytes": a.size_bytes}
            for a in (message.attachments or ())
        ],
    }
