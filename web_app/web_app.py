# web_app.py
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Tuple
from wsgiref.simple_server import make_server

from auth_session import AuthBackend, AuthSession, GoTrueAuthBackend, StaticAuthBackend
from clock import Clock, FixedClock, SystemClock
from contracts_store import ContractStore
from contracts_workspace import ContractsWorkspace
from settings import Settings, load_settings
from web_app.auth_controller import AuthController
from web_app.upload_controller import UploadController
from web_app.web_controller import MainController
from web_app.web_session import SessionRegistry
from web_app.web_views import layout, not_found_view

logger = logging.getLogger(__name__)


# ---------- фабрики ----------
def make_clock(settings: Settings) -> Clock:
    if settings.fixed_today:
        return FixedClock(date.fromisoformat(settings.fixed_today))
    return SystemClock()


def make_auth_backend(settings: Settings) -> AuthBackend:
    """Для 'rest' — внешний сервис идентификации, иначе пользователи из LOCAL_USERS."""
    if settings.backend == "rest":
        return GoTrueAuthBackend(
            settings.backend_url, settings.backend_anon_key, timeout=settings.http_timeout
        )
    return StaticAuthBackend(settings.local_users)


def make_store(settings: Settings, clock: Clock, auth: AuthSession) -> ContractStore:
    """
    Возвращает одно из хранилищ согласно settings.backend.
    """
    if settings.backend == "rest":
        from contracts_store_rest import RestContractStore

        def token() -> Optional[str]:
            s = auth.current()
            return s.access_token if s else None

        return RestContractStore(
            settings.backend_url, settings.backend_anon_key, clock,
            token_provider=token, bucket=settings.storage_bucket,
            timeout=settings.http_timeout,
        )

    if settings.backend == "db":
        from contracts_store_db import DbContractStore

        return DbContractStore(clock, **settings.db_config)

    if settings.backend == "yaml":
        from contracts_store_yaml import YamlContractStore

        return YamlContractStore(settings.yaml_path, clock)

    # по умолчанию json
    from contracts_store_json import JsonContractStore

    return JsonContractStore(settings.json_path, clock)


def make_workspace_factory(
    settings: Settings,
    *,
    clock: Optional[Clock] = None,
    auth_backend: Optional[AuthBackend] = None,
    store_factory: Optional[Callable[[AuthSession], ContractStore]] = None,
) -> Callable[[], ContractsWorkspace]:
    clk = clock or make_clock(settings)
    backend = auth_backend or make_auth_backend(settings)

    def factory() -> ContractsWorkspace:
        auth = AuthSession(backend)
        store = store_factory(auth) if store_factory else make_store(settings, clk, auth)
        return ContractsWorkspace(auth, store, clk)

    return factory


def application_factory(
    settings: Optional[Settings] = None,
    *,
    workspace_factory: Optional[Callable[[], ContractsWorkspace]] = None,
) -> Tuple[Callable, SessionRegistry]:
    settings = settings or load_settings()
    registry = SessionRegistry(
        workspace_factory or make_workspace_factory(settings),
        idle_seconds=settings.session_idle_seconds,
    )
    auth_ctrl = AuthController(registry)
    main_ctrl = MainController(registry)
    upload_ctrl = UploadController(registry)

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "/")
        method = environ.get("REQUEST_METHOD", "GET").upper()

        # Вход / выход
        if path == "/login":
            if method == "POST":
                return auth_ctrl.login(environ, start_response)
            return auth_ctrl.login_form(environ, start_response)
        if path == "/logout" and method == "POST":
            return auth_ctrl.logout(environ, start_response)

        # Страницы
        if path in ("/", "/dashboard"):
            return main_ctrl.dashboard(environ, start_response)
        if path == "/contracts":
            return main_ctrl.contracts(environ, start_response)
        if path == "/analysis":
            return main_ctrl.analysis(environ, start_response)
        if path == "/settings":
            return main_ctrl.settings(environ, start_response)

        # Загрузка документа
        if path == "/contract/upload":
            if method != "POST":
                start_response("405 Method Not Allowed",
                               [("Content-Type", "text/plain; charset=utf-8"), ("Allow", "POST")])
                return [b"Method Not Allowed"]
            return upload_ctrl.upload(environ, start_response)

        # Простой "healthcheck"
        if path == "/debug/health":
            body = (
                "<h1>Health</h1>"
                f"<p>Хранилище: <b>{settings.backend}</b></p>"
                f"<p>Активных сессий: <b>{len(registry)}</b></p>"
            )
            start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
            return [layout("Health", body)]

        start_response("404 Not Found", [("Content-Type", "text/html; charset=utf-8")])
        return [not_found_view(f"Страница {path} не найдена")]

    return app, registry


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app, _ = application_factory(settings)
    with make_server(settings.http_host, settings.http_port, app) as httpd:
        logger.info(
            "Web-приложение запущено: http://%s:%s/ (хранилище = %s)",
            settings.http_host, settings.http_port, settings.backend,
        )
        httpd.serve_forever()


if __name__ == "__main__":
    main()
