"""对外 API 服务模块。

提供简化的函数接口供上层应用（终端、Web 前端等）调用。
进程内只维护一个默认会话，对应前端本地存储里的那一份聊天记录。
"""

from typing import Any, Dict, List, Optional

from visa_core.agents.backend import ProviderBackend
from visa_core.agents.orchestrator import ConversationOrchestrator
from visa_core.config.settings import settings
from visa_core.domain.exceptions import BusinessError
from visa_core.domain.session import Message, Session, SessionView
from visa_core.infrastructure.logging.logger import logger
from visa_core.infrastructure.storage.json_store import JsonSessionStore
from visa_core.providers import create_provider


_orchestrator: Optional[ConversationOrchestrator] = None
_session: Optional[Session] = None


def get_default_orchestrator(view: Optional[SessionView] = None) -> ConversationOrchestrator:
    """获取默认的会话编排器实例（单例）。"""
    global _orchestrator
    if _orchestrator is None:
        store = JsonSessionStore(root=settings.storage_root, session_key=settings.session_key)
        backend = ProviderBackend(create_provider())
        _orchestrator = ConversationOrchestrator(store=store, backend=backend, view=view)
    return _orchestrator


def open_session() -> Session:
    """获取默认会话，首次调用时从存储恢复。"""
    global _session
    if _session is None:
        _session = get_default_orchestrator().load_session()
    return _session


async def send_message(text: str) -> Dict[str, Any]:
    """提交一条用户消息并等待回复结束。

    Returns:
        包含状态、最新一条助手消息（若有）和其耗时的字典

    Raises:
        各种 domain.exceptions 中定义的异常（空消息、超长、会话忙）
    """
    session = open_session()
    try:
        await get_default_orchestrator().submit(session, text)
    except BusinessError as e:
        logger.error(f"Submit rejected: {e}", extra={"extra": {
            "code": e.code,
            "error": e.message,
        }})
        raise
    last = session.history[-1] if session.history else None
    reply = last if last is not None and last.role == "assistant" else None
    return {
        "status": session.status.value,
        "assistant_message": _message_dict(reply, session) if reply else None,
    }


def stop_reply() -> bool:
    """停止当前正在生成的回复。"""
    return get_default_orchestrator().stop(open_session())


def clear_chat() -> None:
    """清空聊天记录与耗时。"""
    get_default_orchestrator().clear(open_session())


def list_messages() -> List[Dict[str, Any]]:
    """获取默认会话的所有消息。

    Returns:
        消息列表，每项包含 id, role, content, created_at, duration_ms
    """
    session = open_session()
    return [_message_dict(m, session) for m in session.history]


def _message_dict(message: Message, session: Session) -> Dict[str, Any]:
    return {
        "id": message.id,
        "role": message.role,
        "content": message.text,
        "created_at": message.created_at.isoformat(),
        "duration_ms": session.durations.get(message.id),
    }
