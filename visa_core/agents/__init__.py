"""会话编排与后端协作者。"""

from visa_core.agents.backend import ModelBackend, ProviderBackend
from visa_core.agents.orchestrator import ConversationOrchestrator

__all__ = ["ConversationOrchestrator", "ModelBackend", "ProviderBackend"]
