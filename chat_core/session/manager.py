"""会话身份管理。

SessionManager 只负责 (user_id, session_id) 的创建与销毁，
不持有消息历史，也不做任何网络调用。
"""

import secrets
import string
import time
from typing import Callable, List, Optional

from chat_core.domain.exceptions import ValidationError
from chat_core.domain.models import Session
from chat_core.infrastructure.logging.logger import logger


_ID_ALPHABET = string.digits + string.ascii_lowercase
_RANDOM_SUFFIX_LENGTH = 9


def generate_session_id() -> str:
    """生成 session_<毫秒时间戳>_<9 位随机 base36> 形式的会话 ID。

    不检查重复，依赖时间戳 + 随机部分保证极低的碰撞概率。
    """

    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_RANDOM_SUFFIX_LENGTH))
    return f"session_{millis}_{suffix}"


LifecycleListener = Callable[[Optional[Session]], None]


class SessionManager:
    """会话身份的唯一来源。

    start/reset 之后依次回调已注册的监听者，参数为新的当前会话（重置后为 None），
    持有消息历史的一方据此清空与该会话绑定的状态。
    """

    def __init__(self) -> None:
        self._current: Optional[Session] = None
        self._listeners: List[LifecycleListener] = []

    @property
    def current(self) -> Optional[Session]:
        return self._current

    @property
    def is_active(self) -> bool:
        return self._current is not None

    def start(self, user_id: str, session_id_hint: Optional[str] = None) -> Session:
        """开始一个新会话。

        Args:
            user_id: 用户名或编号，去除首尾空白后不能为空
            session_id_hint: 外部指定的会话 ID（可选，为空时自动生成）

        Returns:
            新创建的 Session；之前的会话对象不会被修改

        Raises:
            ValidationError: user_id 为空
        """
        uid = (user_id or "").strip()
        if not uid:
            raise ValidationError(code="EMPTY_USER_ID", message="User id must not be empty")
        sid = (session_id_hint or "").strip() or generate_session_id()
        self._current = Session(user_id=uid, session_id=sid)
        logger.info("Started session", extra={"extra": {
            "session_id": sid,
            "generated": not (session_id_hint or "").strip(),
        }})
        self._emit()
        return self._current

    def reset(self) -> None:
        """丢弃当前会话，可重复调用。"""
        if self._current is not None:
            logger.info("Reset session", extra={"extra": {"session_id": self._current.session_id}})
        self._current = None
        self._emit()

    def add_listener(self, listener: LifecycleListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: LifecycleListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self._current)
