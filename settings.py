# settings.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

BACKENDS = ("rest", "db", "json", "yaml")


def _parse_users(raw: str) -> dict[str, str]:
    """
    LOCAL_USERS="anna@example.com:secret, boris@example.com:qwerty"
    -> {email: password}
    """
    users: dict[str, str] = {}
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        email, sep, password = chunk.partition(":")
        if not sep or not email.strip() or not password:
            raise ValueError(f"LOCAL_USERS: ожидаю 'email:пароль', получено {chunk!r}")
        users[email.strip().lower()] = password
    return users


@dataclass(frozen=True)
class Settings:
    backend: str = "json"                      # 'rest' | 'db' | 'json' | 'yaml'
    backend_url: str = ""
    backend_anon_key: str = ""
    storage_bucket: str = "contracts"
    db_config: dict[str, Any] = field(default_factory=lambda: {
        "host": "127.0.0.1",
        "port": 5432,
        "dbname": "contracts_db",
        "user": "postgres",
        "password": "",
    })
    json_path: str = "contracts.json"
    yaml_path: str = "contracts.yaml"
    local_users: dict[str, str] = field(default_factory=dict)
    http_host: str = "127.0.0.1"
    http_port: int = 8000
    http_timeout: float = 15.0
    log_level: str = "INFO"
    # простой браузерной сессии, после которого она закрывается
    session_idle_seconds: float = 3600.0
    # дата "сегодня" для демо-стенда; None -> системные часы
    fixed_today: Optional[str] = None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Собирает Settings из переменных окружения (и .env, если он есть).
    env можно передать явно — удобно в тестах.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    backend = (env.get("CONTRACTS_BACKEND") or "json").strip().lower()
    if backend not in BACKENDS:
        raise ValueError(
            f"CONTRACTS_BACKEND={backend!r}: допустимо одно из {', '.join(BACKENDS)}"
        )

    return Settings(
        backend=backend,
        backend_url=(env.get("BACKEND_URL") or "").rstrip("/"),
        backend_anon_key=env.get("BACKEND_ANON_KEY") or "",
        storage_bucket=env.get("STORAGE_BUCKET") or "contracts",
        db_config={
            "host": env.get("DB_HOST") or "127.0.0.1",
            "port": int(env.get("DB_PORT") or 5432),
            "dbname": env.get("DB_NAME") or "contracts_db",
            "user": env.get("DB_USER") or "postgres",
            "password": env.get("DB_PASSWORD") or "",
        },
        json_path=env.get("CONTRACTS_JSON_PATH") or "contracts.json",
        yaml_path=env.get("CONTRACTS_YAML_PATH") or "contracts.yaml",
        local_users=_parse_users(env.get("LOCAL_USERS") or ""),
        http_host=env.get("HTTP_HOST") or "127.0.0.1",
        http_port=int(env.get("HTTP_PORT") or 8000),
        http_timeout=float(env.get("HTTP_TIMEOUT") or 15),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        session_idle_seconds=float(env.get("SESSION_IDLE_SECONDS") or 3600),
        fixed_today=env.get("FIXED_TODAY") or None,
    )
