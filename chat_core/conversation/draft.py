"""用户正在编辑、尚未发送的输入。"""

from typing import Iterable, List, Tuple

from chat_core.domain.models import AttachmentRef


class DraftInput:
    """输入框文本与待发送附件列表。

    提交时由控制器取快照并清空，之后对草稿的修改不会影响已追加的消息。
    """

    def __init__(self, text: str = "", attachments: Iterable[AttachmentRef] = ()):
        self.text = text
        self._attachments: List[AttachmentRef] = list(attachments)

    @property
    def attachments(self) -> Tuple[AttachmentRef, ...]:
        return tuple(self._attachments)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip() and not self._attachments

    def add_attachments(self, files: Iterable[AttachmentRef]) -> None:
        self._attachments.extend(files)

    def remove_attachment(self, index: int) -> AttachmentRef:
        """按位置移除一个附件，越界时抛出 IndexError。"""
        return self._attachments.pop(index)

    def snapshot(self) -> Tuple[str, Tuple[AttachmentRef, ...]]:
        return self.text, tuple(self._attachments)

    def clear(self) -> None:
        self.text = ""
        self._attachments.clear()
