"""对话控制器核心模块。

负责维护有序的消息历史，并按“每轮一次请求”的方式编排：
先乐观追加用户消息，再调用传输层，最后追加且只追加一条 bot 消息
（正常回答或错误提示）。
"""

import asyncio
import itertools
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from chat_core.conversation.draft import DraftInput
from chat_core.domain.exceptions import (
    GENERIC_ERROR_TEXT,
    MalformedResponseError,
    TransportError,
    describe_error,
)
from chat_core.domain.models import (
    ATTACHMENT_PLACEHOLDER,
    AttachmentRef,
    ConversationSnapshot,
    Message,
    Session,
    TurnPhase,
)
from chat_core.infrastructure.logging.logger import logger
from chat_core.session.manager import SessionManager
from chat_core.transport.base import ChatTransport


Listener = Callable[[ConversationSnapshot], None]


class ConversationController:
    """单个会话的消息历史与请求编排。

    状态机：IDLE --submit--> PENDING --(成功或失败)--> IDLE。
    PENDING 期间的 submit 一律忽略，保证同一会话最多只有一个在途请求。
    """

    def __init__(self, transport: ChatTransport, session_manager: Optional[SessionManager] = None):
        self._transport = transport
        self._sessions = session_manager or SessionManager()
        self._messages: List[Message] = []
        self._phase = TurnPhase.IDLE
        self._seq = itertools.count(1)
        # 每次 start/reset 递增，用于丢弃旧会话的迟到结果
        self._epoch = 0
        self._listeners: List[Listener] = []
        self._sessions.add_listener(self._on_session_change)

    # ---- 只读状态 ----

    @property
    def transport(self) -> ChatTransport:
        return self._transport

    @property
    def session(self) -> Optional[Session]:
        return self._sessions.current

    @property
    def messages(self) -> tuple:
        return tuple(self._messages)

    @property
    def phase(self) -> TurnPhase:
        return self._phase

    @property
    def pending(self) -> bool:
        return self._phase is TurnPhase.PENDING

    def snapshot(self) -> ConversationSnapshot:
        return ConversationSnapshot(
            session=self._sessions.current,
            messages=tuple(self._messages),
            pending=self.pending,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """注册状态观察者，每次变更后回调一次。返回取消订阅函数。"""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- 生命周期 ----

    def start(self, user_id: str, session_id_hint: Optional[str] = None) -> Session:
        """开始新会话并清空历史。ValidationError 直接抛给调用方。"""

        return self._sessions.start(user_id, session_id_hint)

    def reset(self) -> None:
        self._sessions.reset()

    def _on_session_change(self, session: Optional[Session]) -> None:
        # 无论经由控制器还是共享的 SessionManager，身份变化都会清空历史
        self._clear()
        self._notify()

    # ---- 对话 ----

    async def submit_draft(self, draft: DraftInput) -> bool:
        """提交草稿。只有本轮被接受时才清空草稿。"""

        text, attachments = draft.snapshot()
        if not self._accepts(text, attachments):
            return False
        draft.clear()
        return await self.submit(text, attachments)

    async def submit(self, text: str, attachments: Iterable[AttachmentRef] = ()) -> bool:
        """执行一轮对话。

        Args:
            text: 用户输入文本
            attachments: 附件元数据（只记录在用户消息上，不会发送给接口）

        Returns:
            本轮是否被接受；无会话、请求进行中或输入为空时返回 False
        """
        files = tuple(attachments)
        if not self._accepts(text, files):
            return False

        session = self._sessions.current
        content = (text or "").strip() or ATTACHMENT_PLACEHOLDER
        user_msg = Message(
            id=self._next_id("user"),
            content=content,
            sender="user",
            attachments=files or None,
        )
        self._messages.append(user_msg)
        self._phase = TurnPhase.PENDING
        epoch = self._epoch
        self._notify()

        log_ctx: Dict[str, Any] = {
            "session_id": session.session_id,
            "transport": getattr(self._transport, "name", type(self._transport).__name__),
            "user_message_id": user_msg.id,
        }
        self._log(logging.INFO, "Dispatching turn", log_ctx, attachments=len(files))
        start_time = time.time()

        try:
            answer = await self._transport.send(session.user_id, session.session_id, content)
            if not isinstance(answer, str) or not answer.strip():
                raise MalformedResponseError(
                    code="MALFORMED_RESPONSE",
                    message="No answer received from API",
                    detail=f"transport returned {answer!r}",
                )
        except TransportError as e:
            self._log(
                logging.WARNING,
                "Turn failed",
                log_ctx,
                kind=e.kind,
                code=e.code,
                detail=e.detail,
            )
            self._settle(epoch, session, describe_error(e), is_error=True, log_ctx=log_ctx)
        except asyncio.CancelledError:
            self._log(logging.WARNING, "Turn cancelled", log_ctx)
            self._settle(epoch, session, GENERIC_ERROR_TEXT, is_error=True, log_ctx=log_ctx)
            raise
        except Exception:
            logger.exception("Unexpected transport failure", extra={"extra": log_ctx})
            self._settle(epoch, session, GENERIC_ERROR_TEXT, is_error=True, log_ctx=log_ctx)
        else:
            self._settle(epoch, session, answer, is_error=False, log_ctx=log_ctx)

        self._log(
            logging.INFO,
            "Completed turn",
            log_ctx,
            elapsed_seconds=round(time.time() - start_time, 2),
        )
        return True

    # ---- 辅助方法 ----

    def _accepts(self, text: str, attachments: tuple) -> bool:
        if self._sessions.current is None:
            self._log(logging.WARNING, "Ignored submit without active session", {})
            return False
        if self._phase is TurnPhase.PENDING:
            self._log(
                logging.INFO,
                "Ignored submit while a turn is pending",
                {"session_id": self._sessions.current.session_id},
            )
            return False
        return bool((text or "").strip() or attachments)

    def _settle(
        self,
        epoch: int,
        session: Session,
        content: str,
        is_error: bool,
        log_ctx: Dict[str, Any],
    ) -> None:
        """追加本轮唯一的 bot 消息并回到 IDLE。"""

        if epoch != self._epoch or self._sessions.current is not session:
            # 请求期间会话被重置或重新开始，结果不再属于当前历史
            self._log(logging.INFO, "Discarded reply for a reset session", log_ctx)
            return
        bot_msg = Message(
            id=self._next_id("error" if is_error else "bot"),
            content=content,
            sender="bot",
            is_error=is_error,
        )
        self._messages.append(bot_msg)
        self._phase = TurnPhase.IDLE
        log_ctx["bot_message_id"] = bot_msg.id
        self._notify()

    def _clear(self) -> None:
        self._messages = []
        self._phase = TurnPhase.IDLE
        self._seq = itertools.count(1)
        self._epoch += 1

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._seq)}"

    def _notify(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("Conversation listener failed")

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
