"""领域层模型与协议。

包含：
- models: 发给 Provider 的 ChatMessage / ChatRequest / ChatStreamChunk 模型。
- session: 会话、消息、请求状态与 SessionStore 抽象。
- exceptions: 业务异常类型定义。
"""
