"""会话编排核心模块。

负责处理一次用户提交：输入校验、追加用户消息、范围判定，
然后要么在本地生成固定回复，要么把完整历史交给后端并流式收集回复。
同时维护 RequestStatus 状态机、回复耗时以及会话的持久化。

所有会话修改都发生在同一个事件循环里；只有等待后端回复时才会挂起。
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from visa_core.agents.backend import ModelBackend
from visa_core.config.settings import settings
from visa_core.domain.exceptions import SessionBusyError, ValidationError
from visa_core.domain.session import (
    InFlightReply,
    Message,
    RequestStatus,
    Session,
    SessionStore,
    SessionView,
    new_message_id,
)
from visa_core.infrastructure.logging.logger import logger
from visa_core.prompts import build_system_prompt
from visa_core.scope.classifier import ClassificationContext, ScopeClassifier, Verdict
from visa_core.scope.keywords import DEFAULT_RULES
from visa_core.scope.responses import response_for


class ConversationOrchestrator:
    def __init__(
        self,
        store: SessionStore,
        backend: ModelBackend,
        classifier: Optional[ScopeClassifier] = None,
        view: Optional[SessionView] = None,
        system_prompt: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
        max_message_length: Optional[int] = None,
    ):
        self._store = store
        self._backend = backend
        self._classifier = classifier or ScopeClassifier(
            DEFAULT_RULES.with_overrides(
                capability_first_message_only=settings.capability_first_message_only,
            )
        )
        self._view = view
        self._system_prompt = system_prompt or build_system_prompt(settings.ai_name, settings.owner_name)
        self._clock = clock
        self._max_message_length = max_message_length or settings.max_message_length

    def load_session(self) -> Session:
        """从存储恢复会话；缺失或损坏的数据由存储层转成空快照。"""

        session = Session.from_snapshot(self._store.load())
        self._log(
            logging.INFO,
            "Loaded session",
            {},
            message_count=len(session.history),
        )
        self._render(session)
        return session

    async def submit(self, session: Session, raw_text: Optional[str]) -> Session:
        """处理一次用户提交。

        Raises:
            ValidationError: 消息为空或超长，会话不做任何修改。
            SessionBusyError: 会话已有后端调用在进行中。
        """

        text = self._validate(raw_text)
        if session.is_busy:
            raise SessionBusyError()

        log_ctx: Dict[str, Any] = {"trace_id": f"tr-{uuid4().hex}"}
        is_first = session.user_message_count() == 0
        user_msg = Message.create("user", text)
        session.append(user_msg)
        self._persist(session, log_ctx)
        self._render(session)

        verdict = self._classifier.classify(
            text.lower(),
            ClassificationContext(is_first_user_message=is_first),
        )
        self._log(
            logging.INFO,
            "Classified message",
            log_ctx,
            message_id=user_msg.id,
            verdict=verdict.value,
            first_user_message=is_first,
        )

        if verdict is Verdict.IN_SCOPE:
            await self._forward(session, log_ctx)
        else:
            self._reply_locally(session, verdict, log_ctx)
        return session

    def stop(self, session: Session) -> bool:
        """请求取消在途的后端调用。

        只在 submitted/streaming 状态下生效：取消任务但不等待其结束，
        已收到的部分内容原样提交为一条助手消息。其他状态下不做任何事并返回 False。
        """

        inflight = session.inflight
        if inflight is None or session.status not in (RequestStatus.SUBMITTED, RequestStatus.STREAMING):
            return False
        inflight.stop_requested = True
        inflight.task.cancel()
        log_ctx: Dict[str, Any] = {"reply_id": inflight.reply_id}
        if inflight.chunks:
            self._commit_reply(session, inflight, log_ctx)
        session.inflight = None
        session.transition(RequestStatus.IDLE)
        self._log(logging.INFO, "Stopped reply", log_ctx, partial_chunks=len(inflight.chunks))
        self._render(session)
        return True

    def clear(self, session: Session) -> Session:
        """清空历史与耗时并持久化空快照，不经过范围判定。"""

        if session.inflight is not None:
            raise SessionBusyError("Stop the current reply before clearing the chat")
        session.reset()
        log_ctx: Dict[str, Any] = {}
        try:
            self._store.clear()
        except Exception as e:
            self._log(logging.WARNING, "Failed to persist cleared session", log_ctx, error=str(e))
        self._log(logging.INFO, "Cleared session", log_ctx)
        self._render(session)
        return session

    def report_duration(self, session: Session, message_id: str, duration_ms: float) -> None:
        """展示层回报某条消息的耗时。"""

        if not session.has_message(message_id):
            raise ValidationError(code="UNKNOWN_MESSAGE", message=message_id)
        session.durations[message_id] = float(duration_ms)
        self._persist(session, {"message_id": message_id})
        self._render(session)

    # ---- 内部流程 ----

    def _validate(self, raw_text: Optional[str]) -> str:
        text = (raw_text or "").strip()
        if not text:
            raise ValidationError(code="EMPTY_MESSAGE", message="Message cannot be empty.")
        if len(text) > self._max_message_length:
            raise ValidationError(
                code="MESSAGE_TOO_LONG",
                message=f"Message must be at most {self._max_message_length} characters.",
            )
        return text

    def _reply_locally(self, session: Session, verdict: Verdict, log_ctx: Dict[str, Any]) -> None:
        reply = Message.create("assistant", response_for(verdict))
        session.append(reply)
        session.transition(RequestStatus.IDLE)
        self._persist(session, log_ctx)
        self._log(logging.INFO, "Replied locally", log_ctx, assistant_message_id=reply.id)
        self._render(session)

    async def _forward(self, session: Session, log_ctx: Dict[str, Any]) -> None:
        session.transition(RequestStatus.SUBMITTED)
        self._render(session)

        history = list(session.history)
        chunks: List[str] = []
        started_at = self._clock()
        task = asyncio.ensure_future(self._pump(session, history, chunks))
        inflight = InFlightReply(task=task, reply_id=new_message_id(), started_at=started_at, chunks=chunks)
        session.inflight = inflight
        log_ctx["reply_id"] = inflight.reply_id

        try:
            await task
        except asyncio.CancelledError:
            if inflight.stop_requested:
                # stop() 已经提交了部分内容并回到 idle
                return
            self.stop(session)
            raise
        except Exception as e:
            if inflight.stop_requested:
                return
            session.inflight = None
            session.transition(RequestStatus.ERROR)
            self._log(logging.ERROR, "Backend call failed", log_ctx, error=str(e), error_type=type(e).__name__)
            self._render(session)
            return

        if inflight.stop_requested or session.inflight is not inflight:
            # 任务结束后、本协程恢复前 stop() 已经提交过这条回复
            return
        self._commit_reply(session, inflight, log_ctx)
        session.inflight = None
        session.transition(RequestStatus.IDLE)
        self._render(session)

    async def _pump(self, session: Session, history: List[Message], chunks: List[str]) -> None:
        async for text in self._backend.stream_reply(self._system_prompt, history):
            if session.status is RequestStatus.SUBMITTED:
                session.transition(RequestStatus.STREAMING)
            chunks.append(text)
            self._render(session)

    def _commit_reply(self, session: Session, inflight: InFlightReply, log_ctx: Dict[str, Any]) -> None:
        reply = Message.create("assistant", "".join(inflight.chunks), message_id=inflight.reply_id)
        elapsed_ms = round((self._clock() - inflight.started_at) * 1000, 1)
        session.append(reply)
        session.durations[reply.id] = elapsed_ms
        self._persist(session, log_ctx)
        self._log(
            logging.INFO,
            "Stored assistant reply",
            log_ctx,
            assistant_message_id=reply.id,
            elapsed_ms=elapsed_ms,
        )

    def _persist(self, session: Session, log_ctx: Dict[str, Any]) -> None:
        # 持久化失败只记录日志，内存中的会话仍然有效
        try:
            self._store.save(session.snapshot())
        except Exception as e:
            self._log(logging.WARNING, "Failed to persist session", log_ctx, error=str(e))

    def _render(self, session: Session) -> None:
        if self._view is not None:
            self._view.render(list(session.history), session.status, dict(session.durations))

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
