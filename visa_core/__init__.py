"""Visa Core 顶层包。

该包提供申根签证助手的核心实现：消息范围判定、本地固定回复、
会话编排（转发到 LLM Provider 并流式收集回复）、
会话状态的持久化以及配置加载与日志。
"""

from visa_core.agents.orchestrator import ConversationOrchestrator
from visa_core.domain.session import Message, RequestStatus, Session
from visa_core.scope.classifier import Verdict, classify

__all__ = [
    "ConversationOrchestrator",
    "Message",
    "RequestStatus",
    "Session",
    "Verdict",
    "classify",
]
