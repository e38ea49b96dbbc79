# web_session.py
from __future__ import annotations

import logging
import secrets
import time
from http.cookies import SimpleCookie
from typing import Callable, Optional

from contracts_workspace import ContractsWorkspace

logger = logging.getLogger(__name__)

COOKIE_NAME = "cd_session"
DEFAULT_IDLE_SECONDS = 60 * 60


class SessionRegistry:
    """
    Браузерная сессия (cookie) -> собственный ContractsWorkspace.
    Между вкладками разных пользователей ничего не разделяется.
    Сессии, к которым не обращались дольше idle_seconds, закрываются.
    """

    def __init__(
        self,
        factory: Callable[[], ContractsWorkspace],
        *,
        idle_seconds: float = DEFAULT_IDLE_SECONDS,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self._idle_seconds = idle_seconds
        self._now = now
        self._by_token: dict[str, ContractsWorkspace] = {}
        self._seen: dict[str, float] = {}

    @staticmethod
    def token_from(environ) -> Optional[str]:
        raw = environ.get("HTTP_COOKIE", "")
        if not raw:
            return None
        cookie: SimpleCookie = SimpleCookie()
        cookie.load(raw)
        morsel = cookie.get(COOKIE_NAME)
        return morsel.value if morsel else None

    def get(self, environ) -> Optional[ContractsWorkspace]:
        self.evict_idle()
        token = self.token_from(environ)
        ws = self._by_token.get(token) if token else None
        if ws is not None:
            self._seen[token] = self._now()  # type: ignore[index]
        return ws

    def new_workspace(self) -> ContractsWorkspace:
        """Ещё не зарегистрированный workspace — для попытки входа."""
        return self._factory()

    def register(self, ws: ContractsWorkspace) -> str:
        """Регистрирует workspace после успешного входа, возвращает токен для cookie."""
        self.evict_idle()
        token = secrets.token_urlsafe(24)
        self._by_token[token] = ws
        self._seen[token] = self._now()
        return token

    def drop(self, environ) -> None:
        token = self.token_from(environ)
        if token:
            self._close(token)

    def evict_idle(self) -> None:
        deadline = self._now() - self._idle_seconds
        for token in [t for t, seen in self._seen.items() if seen < deadline]:
            logger.info("Сессия закрыта по простою")
            self._close(token)

    def _close(self, token: str) -> None:
        self._seen.pop(token, None)
        ws = self._by_token.pop(token, None)
        if ws is not None:
            ws.close()

    def __len__(self) -> int:
        return len(self._by_token)

    @staticmethod
    def set_cookie_header(token: str) -> tuple[str, str]:
        return ("Set-Cookie", f"{COOKIE_NAME}={token}; Path=/; HttpOnly; SameSite=Lax")

    @staticmethod
    def clear_cookie_header() -> tuple[str, str]:
        return ("Set-Cookie", f"{COOKIE_NAME}=; Path=/; Max-Age=0; HttpOnly; SameSite=Lax")
