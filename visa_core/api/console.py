"""终端展示层：把会话变化打印到标准输出。"""

from typing import Dict, List, Set, TextIO
import sys

from visa_core.domain.session import Message, RequestStatus


class ConsoleView:
    def __init__(self, stream: TextIO = sys.stdout):
        self._stream = stream
        self._shown: Set[str] = set()
        self._status = RequestStatus.IDLE

    def render(self, history: List[Message], status: RequestStatus, durations: Dict[str, float]) -> None:
        if not history:
            self._shown.clear()
        for m in history:
            if m.id in self._shown:
                continue
            self._shown.add(m.id)
            if m.role == "assistant":
                suffix = f"  ({durations[m.id] / 1000:.1f}s)" if m.id in durations else ""
                self._stream.write(f"Assistant: {m.text}{suffix}\n")
        if status is not self._status:
            self._status = status
            if status is RequestStatus.SUBMITTED:
                self._stream.write("... thinking\n")
            elif status is RequestStatus.ERROR:
                self._stream.write("[error] The assistant could not answer. Send your question again to retry.\n")
        self._stream.flush()
