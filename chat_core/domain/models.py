"""对话客户端的核心数据模型。

- Session: 会话身份（user id + session id）。
- AttachmentRef: 附件元数据，只记录名称、类型和大小，不传输二进制内容。
- Message: 历史中的一条消息，追加后不可变。
- ConversationSnapshot: 提供给渲染层的只读状态视图。
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional, Tuple


Sender = Literal["user", "bot"]

# 只有附件、没有文本时用户消息的占位内容
ATTACHMENT_PLACEHOLDER = "📎 Attachment sent"

SHORT_ID_LENGTH = 8


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TurnPhase(str, Enum):
    """单轮对话的状态机。"""

    IDLE = "idle"
    PENDING = "pending"


@dataclass(frozen=True)
class Session:
    user_id: str
    session_id: str
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def short_id(self) -> str:
        """界面上只展示 session id 的末尾部分。"""

        return self.session_id[-SHORT_ID_LENGTH:]


@dataclass(frozen=True)
class AttachmentRef:
    name: str
    mime_type: str = "application/octet-stream"
    size_bytes: int = 0

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


@dataclass(frozen=True)
class Message:
    """一条对话消息。

    - id: 会话内唯一，按创建顺序单调递增。
    - content: 非空文本；纯附件消息使用 ATTACHMENT_PLACEHOLDER。
    - sender: "user" 或 "bot"。
    - attachments: 仅用户消息可能携带，没有附件时为 None。
    - is_error: bot 消息是否由一次失败的请求转换而来。
    """

    id: str
    content: str
    sender: Sender
    timestamp: datetime = field(default_factory=_utcnow)
    attachments: Optional[Tuple[AttachmentRef, ...]] = None
    is_error: bool = False


@dataclass(frozen=True)
class ConversationSnapshot:
    session: Optional[Session]
    messages: Tuple[Message, ...]
    pending: bool
