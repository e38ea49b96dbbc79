# auth_session.py
from __future__ import annotations

import hmac
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from errors import AuthFailure
from mvc_observer import Subject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    user_id: str
    email: str
    access_token: str = ""


class AuthBackend(Protocol):
    def sign_in(self, email: str, password: str) -> Session: ...

    def sign_out(self, session: Session) -> None: ...


class StaticAuthBackend:
    """
    Пользователи из конфигурации (LOCAL_USERS). Для локального запуска и тестов.
    user_id стабилен для email — один и тот же пользователь видит свои договоры.
    """

    def __init__(self, users: dict[str, str]) -> None:
        self._users = {k.strip().lower(): v for k, v in users.items()}

    @staticmethod
    def user_id_for(email: str) -> str:
        return str(uuid.uuid5(uuid.NAMESPACE_URL, f"mailto:{email.strip().lower()}"))

    def sign_in(self, email: str, password: str) -> Session:
        key = (email or "").strip().lower()
        expected = self._users.get(key)
        if expected is None or not hmac.compare_digest(
            expected.encode("utf-8"), (password or "").encode("utf-8")
        ):
            raise AuthFailure("Неверный email или пароль.")
        return Session(user_id=self.user_id_for(key), email=key, access_token=uuid.uuid4().hex)

    def sign_out(self, session: Session) -> None:
        return None


class GoTrueAuthBackend:
    """
    Вход через внешний сервис идентификации (GoTrue-совместимый /auth/v1).
    """

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        *,
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not base_url:
            raise ValueError("BACKEND_URL не задан — вход через сервис идентификации невозможен.")
        self._client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/auth/v1",
            headers={"apikey": anon_key},
            timeout=timeout,
            transport=transport,
        )

    @staticmethod
    def _error_text(resp: httpx.Response) -> str:
        try:
            data: Any = resp.json()
        except ValueError:
            return resp.text or f"HTTP {resp.status_code}"
        if isinstance(data, dict):
            for key in ("error_description", "msg", "message", "error"):
                if data.get(key):
                    return str(data[key])
        return f"HTTP {resp.status_code}"

    def sign_in(self, email: str, password: str) -> Session:
        try:
            resp = self._client.post(
                "/token", params={"grant_type": "password"},
                json={"email": email, "password": password},
            )
        except httpx.HTTPError as e:
            logger.error("Сервис идентификации недоступен: %s", e)
            raise AuthFailure(f"Сервис идентификации недоступен: {e}") from e
        if resp.status_code >= 400:
            raise AuthFailure(self._error_text(resp))
        try:
            data: Any = resp.json()
        except ValueError as e:
            raise AuthFailure("Сервис идентификации вернул не-JSON ответ.") from e
        user = data.get("user") if isinstance(data, dict) else None
        if not isinstance(user, dict) or not user.get("id") or not data.get("access_token"):
            raise AuthFailure("Сервис идентификации вернул неполный ответ.")
        return Session(
            user_id=str(user["id"]),
            email=str(user.get("email") or email),
            access_token=str(data["access_token"]),
        )

    def sign_out(self, session: Session) -> None:
        try:
            resp = self._client.post(
                "/logout", headers={"Authorization": f"Bearer {session.access_token}"}
            )
        except httpx.HTTPError as e:
            raise AuthFailure(f"Сервис идентификации недоступен: {e}") from e
        # 401 — токен уже недействителен, считаем выход состоявшимся
        if resp.status_code >= 400 and resp.status_code != 401:
            raise AuthFailure(self._error_text(resp))

    def close(self) -> None:
        self._client.close()


class AuthSession(Subject):
    """
    Текущая сессия пользователя (или None) + лента изменений.

    События:
      - "signed_in"  payload: Session
      - "signed_out" payload: Session (та, что закончилась)
    """

    def __init__(self, backend: AuthBackend) -> None:
        super().__init__()
        self._backend = backend
        self._session: Optional[Session] = None

    def current(self) -> Optional[Session]:
        return self._session

    def sign_in(self, email: str, password: str) -> Session:
        session = self._backend.sign_in(email, password)
        if self._session is not None and self._session.user_id != session.user_id:
            # другой пользователь в той же вкладке: старая сессия заканчивается
            self._end_local()
        self._session = session
        logger.info("Вход выполнен: %s", session.email)
        self.notify("signed_in", session)
        return session

    def sign_out(self) -> None:
        if self._session is None:
            return
        try:
            self._backend.sign_out(self._session)
        finally:
            # локально сессию завершаем в любом случае
            self._end_local()

    def _end_local(self) -> None:
        ended = self._session
        self._session = None
        if ended is not None:
            logger.info("Выход: %s", ended.email)
            self.notify("signed_out", ended)
