"""Minimal terminal chat with the Schengen visa assistant.

Commands: /clear resets the conversation, /quit exits.
"""

import asyncio

from visa_core.api import service
from visa_core.api.console import ConsoleView
from visa_core.domain.exceptions import BusinessError


async def main() -> None:
    service.get_default_orchestrator(view=ConsoleView())
    service.open_session()
    while True:
        text = await asyncio.to_thread(input, "You: ")
        if text.strip() == "/quit":
            return
        if text.strip() == "/clear":
            service.clear_chat()
            print("Chat cleared")
            continue
        try:
            await service.send_message(text)
        except BusinessError as e:
            print(f"[{e.code}] {e.message}")


if __name__ == "__main__":
    asyncio.run(main())
