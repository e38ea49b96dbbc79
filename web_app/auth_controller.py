# auth_controller.py
from __future__ import annotations

import logging
from typing import Dict
from urllib.parse import parse_qs

from errors import AuthFailure
from web_app.web_session import SessionRegistry
from web_app.web_views import login_view

logger = logging.getLogger(__name__)


class AuthController:
    """
    GET  /login   -> форма входа
    POST /login   -> вход; при успехе cookie + редирект на главную
    POST /logout  -> выход, каталог сессии очищается, cookie сбрасывается
    """

    def __init__(self, registry: SessionRegistry) -> None:
        self.registry = registry

    @staticmethod
    def _read_post(environ) -> Dict[str, str]:
        try:
            size = int(environ.get("CONTENT_LENGTH", "0") or 0)
        except ValueError:
            size = 0
        body = environ["wsgi.input"].read(size).decode("utf-8", errors="ignore")
        parsed = parse_qs(body, keep_blank_values=True)
        return {k: (v[0] if v else "") for k, v in parsed.items()}

    def login_form(self, environ, start_response):
        ws = self.registry.get(environ)
        if ws is not None and ws.auth.current() is not None:
            start_response("302 Found", [("Location", "/")])
            return [b""]
        start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
        return [login_view()]

    def login(self, environ, start_response):
        form = self._read_post(environ)
        email = form.get("email", "").strip()
        password = form.get("password", "")

        headers: list[tuple[str, str]] = []
        ws = self.registry.get(environ)
        fresh = ws is None
        if fresh:
            # в реестр попадает только после успешного входа
            ws = self.registry.new_workspace()

        try:
            ws.auth.sign_in(email, password)
        except AuthFailure as e:
            if fresh:
                ws.close()
            start_response("401 Unauthorized", [("Content-Type", "text/html; charset=utf-8")])
            return [login_view(email=email, error=str(e))]

        if fresh:
            headers.append(self.registry.set_cookie_header(self.registry.register(ws)))
        start_response("302 Found", [("Location", "/"), *headers])
        return [b""]

    def logout(self, environ, start_response):
        ws = self.registry.get(environ)
        if ws is not None:
            try:
                ws.sign_out()
            except AuthFailure as e:
                # локальная сессия уже завершена
                logger.warning("Сервис идентификации не подтвердил выход: %s", e)
            finally:
                self.registry.drop(environ)
        start_response("302 Found", [("Location", "/login"), self.registry.clear_cookie_header()])
        return [b""]
