import json
import os
from pathlib import Path
from uuid import uuid4

from visa_core.config.settings import settings
from visa_core.domain.exceptions import BusinessError
from visa_core.domain.session import SessionSnapshot, SessionStore
from visa_core.infrastructure.logging.logger import logger


class JsonSessionStore(SessionStore):
    """把单个会话快照存成 <root>/sessions/<session_key>.json。

    读取时缺失或损坏的文件都当作空会话处理；写入使用临时文件 + os.replace。
    """

    def __init__(self, root: str | Path | None = None, session_key: str | None = None):
        self._root = Path(root or settings.storage_root).resolve()
        self._sessions_root = self._root / "sessions"
        self._sessions_root.mkdir(parents=True, exist_ok=True)
        self._key = session_key or settings.session_key

    @property
    def path(self) -> Path:
        return self._sessions_root / f"{self._key}.json"

    def load(self) -> SessionSnapshot:
        path = self.path
        if not path.exists():
            return SessionSnapshot()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("snapshot is not an object")
            return SessionSnapshot.from_dict(data)
        except Exception as e:
            logger.warning(
                "Discarding unreadable session snapshot",
                extra={"extra": {"session_key": self._key, "error": str(e)}},
            )
            return SessionSnapshot()

    def save(self, snapshot: SessionSnapshot) -> None:
        path = self.path
        tmp_path = self._sessions_root / f"{self._key}.{uuid4().hex}.json.tmp"
        try:
            tmp_path.write_text(json.dumps(snapshot.to_dict(), ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, path)
        except Exception as e:
            tmp_path.unlink(missing_ok=True)
            raise BusinessError(code="STORE_WRITE_ERROR", message=str(e), session_key=self._key)

    def clear(self) -> None:
        self.save(SessionSnapshot())
