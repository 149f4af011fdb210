"""领域层模型与异常。

包含：
- models: Session / Message / AttachmentRef 等会话数据结构。
- exceptions: 业务异常与传输错误类型定义。
"""
