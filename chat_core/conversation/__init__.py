"""对话编排层。"""

from chat_core.conversation.controller import ConversationController
from chat_core.conversation.draft import DraftInput

__all__ = ["ConversationController", "DraftInput"]
