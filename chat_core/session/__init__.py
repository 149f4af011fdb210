"""会话身份与生命周期管理。"""

from chat_core.session.manager import SessionManager, generate_session_id

__all__ = ["SessionManager", "generate_session_id"]
