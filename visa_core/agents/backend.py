"""后端模型协作者。

会话层只关心 “系统提示词 + 完整历史 -> 异步文本片段流”，
ProviderBackend 负责把它翻译成 ChatRequest 并调用具体 ProviderClient。
"""

import logging
from typing import AsyncIterator, Optional, Protocol, Sequence

from visa_core.config.settings import settings
from visa_core.domain.models import ChatMessage, ChatRequest
from visa_core.domain.session import Message
from visa_core.infrastructure.logging.logger import logger
from visa_core.providers.base import ProviderClient


class ModelBackend(Protocol):
    def stream_reply(self, system_prompt: str, history: Sequence[Message]) -> AsyncIterator[str]:
        ...


class ProviderBackend:
    def __init__(
        self,
        provider_client: ProviderClient,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self._provider_client = provider_client
        self._model = model or getattr(settings, "default_model", "visa-chat")
        self._temperature = temperature if temperature is not None else getattr(settings, "temperature", 0.3)

    def build_request(self, system_prompt: str, history: Sequence[Message]) -> ChatRequest:
        # 每次调用都携带完整历史，不做裁剪
        messages = [ChatMessage(role="system", content=system_prompt)]
        for m in history:
            messages.append(ChatMessage(role=m.role, content=m.text, meta={"message_id": m.id}))
        return ChatRequest(
            provider=self._provider_client.name,
            model=self._model,
            messages=messages,
            temperature=self._temperature,
        )

    async def stream_reply(self, system_prompt: str, history: Sequence[Message]) -> AsyncIterator[str]:
        req = self.build_request(system_prompt, history)
        logger.log(
            logging.INFO,
            "Calling provider",
            extra={"extra": {
                "provider": req.provider,
                "model": req.model,
                "message_count": len(req.messages),
            }},
        )
        async for chunk in self._provider_client.chat_stream(req):
            if chunk.usage:
                logger.info(
                    "Token usage",
                    extra={"extra": {
                        "prompt_tokens": chunk.usage.prompt_tokens,
                        "completion_tokens": chunk.usage.completion_tokens,
                        "total_tokens": chunk.usage.total_tokens,
                    }},
                )
            text = chunk.text
            if text:
                yield text
