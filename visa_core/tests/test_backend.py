import asyncio

from visa_core.agents.backend import ProviderBackend
from visa_core.domain.models import ChatMessage, ChatStreamChoice, ChatStreamChunk, ChatUsage
from visa_core.domain.session import Message


class FakeProvider:
    name = "fake"

    def __init__(self):
        self.requests = []

    async def chat_stream(self, req):
        self.requests.append(req)
        for text in ("Bring ", "", "your passport"):
            yield ChatStreamChunk(
                provider="fake",
                model=req.model,
                choices=[ChatStreamChoice(index=0, delta=ChatMessage(role="assistant", content=text))],
            )
        yield ChatStreamChunk(
            provider="fake",
            model=req.model,
            choices=[],
            usage=ChatUsage(prompt_tokens=3, completion_tokens=2, total_tokens=5),
        )


def test_provider_backend_streams_text_and_sends_full_history():
    provider = FakeProvider()
    backend = ProviderBackend(provider, model="visa-chat", temperature=0.2)
    history = [
        Message.create("user", "hi"),
        Message.create("assistant", "Hi! Which country?"),
        Message.create("user", "France visa documents"),
    ]

    async def run():
        return [t async for t in backend.stream_reply("sys", history)]

    assert asyncio.run(run()) == ["Bring ", "your passport"]
    req = provider.requests[0]
    assert req.provider == "fake"
    assert req.model == "visa-chat"
    assert req.temperature == 0.2
    assert [(m.role, m.content) for m in req.messages] == [
        ("system", "sys"),
        ("user", "hi"),
        ("assistant", "Hi! Which country?"),
        ("user", "France visa documents"),
    ]
    assert req.messages[3].meta["message_id"] == history[2].id
