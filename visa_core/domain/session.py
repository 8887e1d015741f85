"""会话领域模型。

- Message: 一条不可变的对话消息（user / assistant）。
- RequestStatus: 会话当前的请求状态及其合法迁移。
- Session: 消息历史 + 每条消息耗时 + 状态，外加未持久化的在途调用句柄。
- SessionSnapshot: 持久化到存储层的快照结构。
- SessionStore: 存储层协议。
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Protocol, Tuple
from uuid import uuid4

from .exceptions import InvalidTransitionError


MessageRole = Literal["user", "assistant"]


def new_message_id() -> str:
    return f"m-{uuid4().hex}"


@dataclass(frozen=True)
class Message:
    id: str
    role: MessageRole
    content: Tuple[str, ...]
    created_at: datetime

    @classmethod
    def create(cls, role: MessageRole, *segments: str, message_id: Optional[str] = None) -> "Message":
        return cls(
            id=message_id or new_message_id(),
            role=role,
            content=tuple(segments),
            created_at=datetime.now(timezone.utc),
        )

    @property
    def text(self) -> str:
        return "".join(self.content)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "parts": [{"type": "text", "text": s} for s in self.content],
            "created_at": self.created_at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        role = data["role"]
        if role not in ("user", "assistant"):
            raise ValueError(f"Unsupported role: {role!r}")
        parts = data.get("parts") or []
        return cls(
            id=str(data["id"]),
            role=role,
            content=tuple(str(p.get("text") or "") for p in parts if p.get("type", "text") == "text"),
            created_at=datetime.fromisoformat(str(data["created_at"]).replace("Z", "+00:00")),
        )


class RequestStatus(str, Enum):
    IDLE = "idle"
    SUBMITTED = "submitted"
    STREAMING = "streaming"
    ERROR = "error"


# 合法迁移表；idle -> idle 用于本地固定回复
_TRANSITIONS = {
    RequestStatus.IDLE: {RequestStatus.IDLE, RequestStatus.SUBMITTED},
    RequestStatus.SUBMITTED: {RequestStatus.STREAMING, RequestStatus.IDLE, RequestStatus.ERROR},
    RequestStatus.STREAMING: {RequestStatus.IDLE, RequestStatus.ERROR},
    RequestStatus.ERROR: {RequestStatus.IDLE, RequestStatus.SUBMITTED},
}


@dataclass
class SessionSnapshot:
    """持久化快照：{messages, durations}。"""

    messages: List[Message] = field(default_factory=list)
    durations: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "messages": [m.to_dict() for m in self.messages],
            "durations": dict(self.durations),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionSnapshot":
        messages = [Message.from_dict(m) for m in data.get("messages") or []]
        durations = {str(k): float(v) for k, v in (data.get("durations") or {}).items()}
        return cls(messages=messages, durations=durations)


@dataclass
class InFlightReply:
    """一次正在进行的后端调用。"""

    task: "asyncio.Task[None]"
    reply_id: str
    started_at: float
    chunks: List[str] = field(default_factory=list)
    stop_requested: bool = False


@dataclass
class Session:
    history: List[Message] = field(default_factory=list)
    durations: Dict[str, float] = field(default_factory=dict)
    status: RequestStatus = RequestStatus.IDLE
    inflight: Optional[InFlightReply] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> "Session":
        return cls(history=list(snapshot.messages), durations=dict(snapshot.durations))

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(messages=list(self.history), durations=dict(self.durations))

    @property
    def is_busy(self) -> bool:
        return self.status in (RequestStatus.SUBMITTED, RequestStatus.STREAMING) or self.inflight is not None

    def user_message_count(self) -> int:
        return sum(1 for m in self.history if m.role == "user")

    def has_message(self, message_id: str) -> bool:
        return any(m.id == message_id for m in self.history)

    def append(self, message: Message) -> None:
        self.history.append(message)

    def transition(self, target: RequestStatus) -> None:
        if target not in _TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.status.value, target.value)
        self.status = target

    def reset(self) -> None:
        """清空历史与耗时（二者总是一起清空）。"""

        self.history = []
        self.durations = {}
        self.status = RequestStatus.IDLE


class SessionStore(Protocol):
    def load(self) -> SessionSnapshot:
        ...

    def save(self, snapshot: SessionSnapshot) -> None:
        ...

    def clear(self) -> None:
        ...


class SessionView(Protocol):
    """展示层协议：每次会话状态变化后收到最新的 (history, status, durations)。"""

    def render(self, history: List[Message], status: RequestStatus, durations: Dict[str, float]) -> None:
        ...
