# web_app — WSGI-слой: маршрутизация, контроллеры, HTML-представления, реестр сессий.
