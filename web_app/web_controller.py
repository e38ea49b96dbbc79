# web_controller.py
from __future__ import annotations
from urllib.parse import parse_qs

from contracts_workspace import ContractsWorkspace
from errors import FetchFailure
from web_app.web_session import SessionRegistry
from web_app.web_views import (
    analysis_view,
    contracts_list_view,
    dashboard_view,
    settings_view,
)


class MainController:
    """
    Страницы для вошедшего пользователя. Вся логика в контроллере (MVC),
    View — только рендер, Model — ContractsWorkspace (сессия + каталог).
    Без сессии — редирект на /login.
    """

    def __init__(self, registry: SessionRegistry) -> None:
        self.registry = registry

    # ===== helpers =====
    def _workspace(self, environ) -> ContractsWorkspace | None:
        ws = self.registry.get(environ)
        if ws is None or ws.auth.current() is None:
            return None
        return ws

    @staticmethod
    def _to_login(start_response) -> list[bytes]:
        start_response("302 Found", [("Location", "/login")])
        return [b""]

    @staticmethod
    def _wants_refresh(environ) -> bool:
        q = parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True)
        return (q.get("refresh", [""]) or [""])[0] == "1"

    def _maybe_refresh(self, ws: ContractsWorkspace, environ) -> str | None:
        """
        ?refresh=1 — перечитать договоры из хранилища.
        При ошибке каталог остаётся прежним, ошибку показываем на странице.
        """
        if not self._wants_refresh(environ):
            return ws.last_error
        try:
            ws.refresh()
        except FetchFailure as e:
            return e.reason
        return None

    # ===== маршруты =====
    def dashboard(self, environ, start_response) -> list[bytes]:
        ws = self._workspace(environ)
        if ws is None:
            return self._to_login(start_response)
        error = self._maybe_refresh(ws, environ)
        start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
        return [dashboard_view(ws.summary(), today=ws.clock.today(), error_msg=error)]

    def contracts(self, environ, start_response) -> list[bytes]:
        ws = self._workspace(environ)
        if ws is None:
            return self._to_login(start_response)
        error = self._maybe_refresh(ws, environ)
        start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
        return [contracts_list_view(ws.catalog.items(), today=ws.clock.today(), error_msg=error)]

    def analysis(self, environ, start_response) -> list[bytes]:
        ws = self._workspace(environ)
        if ws is None:
            return self._to_login(start_response)
        start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
        return [analysis_view(ws.catalog.items(), today=ws.clock.today())]

    def settings(self, environ, start_response) -> list[bytes]:
        ws = self._workspace(environ)
        if ws is None:
            return self._to_login(start_response)
        session = ws.auth.current()
        start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
        return [settings_view(session.email if session else "")]
