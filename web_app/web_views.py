# web_views.py
from __future__ import annotations
from datetime import date
from typing import Iterable, Optional
from html import escape

from contracts_domain import Contract
from dashboard_service import DashboardSummary
from risk_classifier import RiskLevel, days_until

_NAV = (
    ("/", "Главная"),
    ("/contracts", "Договоры"),
    ("/analysis", "Анализ"),
    ("/settings", "Настройки"),
)


def layout(title: str, body_html: str, *, active: Optional[str] = None) -> bytes:
    nav_html = ""
    if active is not None:
        links = "".join(
            f"<a class='{'button active' if href == active else 'button'}' href='{href}'>{escape(label)}</a>"
            for href, label in _NAV
        )
        nav_html = f"<nav class='btns'>{links}</nav>"
    html = f"""<!doctype html>
<html lang="ru">
<head>
<meta charset="utf-8" />
<title>{escape(title)}</title>
<meta name="viewport" content="width=device-width, initial-scale=1" />
<style>
  :root {{
    --danger:#b00020;
    --warn:#b26a00;
    --ok:#1b7f3b;
    --muted:#666;
    --b:#ddd;
  }}
  body {{ font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Arial; margin: 24px; }}
  nav {{ margin-bottom: 18px; }}
  table {{ border-collapse: collapse; width: 100%; }}
  th, td {{ border: 1px solid var(--b); padding: 8px; vertical-align: top; }}
  th {{ background: #fafafa; text-align: left; }}
  a.button {{ display:inline-block; padding:6px 10px; border:1px solid #555; border-radius:6px; text-decoration:none; }}
  a.button.active {{ background:#333; color:#fff; }}
  .btns > a {{ margin-right: 6px; }}
  .muted {{ color:var(--muted); font-size: 90%; }}
  input {{ padding:6px 8px; box-sizing:border-box; }}
  button {{ padding:6px 12px; }}
  .error {{ color:var(--danger); margin:8px 0; }}
  .flex {{ display:flex; gap:8px; align-items:center; flex-wrap:wrap; }}
  .pill {{ display:inline-block; border:1px solid var(--b); padding:4px 8px; border-radius:999px; font-size:12px; }}
  .risk-High {{ color:var(--danger); font-weight:bold; }}
  .risk-Medium {{ color:var(--warn); }}
  .risk-Low {{ color:var(--ok); }}
  .cards {{ display:grid; grid-template-columns: repeat(4,minmax(160px,1fr)); gap:10px; margin-bottom:18px; }}
  .card {{ border:1px solid var(--b); border-radius:8px; padding:12px; }}
  .card b {{ font-size: 160%; display:block; }}
  .warnbox {{
    border:1px solid var(--danger); border-radius:8px; padding:12px; margin:12px 0; background:#fff5f6;
  }}
</style>
</head>
<body>
{nav_html}
{body_html}
</body>
</html>"""
    return html.encode("utf-8")


def _esc(x: object | None) -> str:
    return escape("" if x is None else str(x), quote=True)


def _risk_cell(level: RiskLevel) -> str:
    return f"<span class='risk-{level.value}'>{escape(level.value)}</span>"


def _error_box(error_msg: Optional[str]) -> str:
    return f"<div class='warnbox error'>⚠ {escape(error_msg)}</div>" if error_msg else ""


def login_view(*, email: str = "", error: Optional[str] = None) -> bytes:
    err_html = f'<div class="error">⚠ {escape(error)}</div>' if error else ""
    body = f"""
<h1>Вход</h1>
{err_html}
<form method="POST" action="/login">
  <p><label>Email<br/><input name="email" type="email" required value="{_esc(email)}"></label></p>
  <p><label>Пароль<br/><input name="password" type="password" required></label></p>
  <button type="submit">Войти</button>
</form>
"""
    return layout("Вход", body)


def dashboard_view(s: DashboardSummary, *, today: date, error_msg: Optional[str] = None) -> bytes:
    rows = []
    for e in s.expiring_soon:
        c = e.contract
        rows.append(
            "<tr>"
            f"<td>{_esc(c.name)}</td>"
            f"<td>{_esc(c.counterparty)}</td>"
            f"<td>{_esc(c.expiration_date)}</td>"
            f"<td>{e.days_left}</td>"
            f"<td>{_risk_cell(c.risk_level)}</td>"
            "</tr>"
        )
    soon_html = (
        "<table><thead><tr><th>Договор</th><th>Контрагент</th><th>До</th><th>Дней</th><th>Риск</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
        if rows else "<p class='muted'>В ближайшие 30 дней ничего не истекает.</p>"
    )
    status_pills = "".join(
        f"<span class='pill'>{escape(st)}: {n}</span>" for st, n in s.by_status.items()
    )

    body = f"""
<h1>Сводка</h1>
<p class="muted">На дату {_esc(today)}</p>
{_error_box(error_msg)}
<div class="cards">
  <div class="card">Всего договоров<b>{s.total}</b></div>
  <div class="card risk-High">Высокий риск<b>{s.by_risk.get("High", 0)}</b></div>
  <div class="card risk-Medium">Средний риск<b>{s.by_risk.get("Medium", 0)}</b></div>
  <div class="card risk-Low">Низкий риск<b>{s.by_risk.get("Low", 0)}</b></div>
</div>
<p class="flex">{status_pills}<span class="pill">Истекли: {s.expired}</span></p>

<h2>Скоро истекают</h2>
{soon_html}
<p style="margin-top:14px;"><a class="button" href="/analysis">К анализу</a></p>
"""
    return layout("Сводка", body, active="/")


def contracts_list_view(
    data: Iterable[Contract], *, today: date, error_msg: Optional[str] = None
) -> bytes:
    rows = []
    for c in data:
        rows.append(
            "<tr>"
            f"<td>{_esc(c.name)}</td>"
            f"<td>{_esc(c.type)}</td>"
            f"<td>{_esc(c.counterparty)}</td>"
            f"<td>{_esc(c.expiration_date)}</td>"
            f"<td>{days_until(today, c.expiration_date)}</td>"
            f"<td>{_risk_cell(c.risk_level)}</td>"
            f"<td>{_esc(c.status)}</td>"
            "</tr>"
        )
    table = (
        "<table><thead><tr><th>Название</th><th>Тип</th><th>Контрагент</th><th>До</th>"
        "<th>Дней</th><th>Риск</th><th>Статус</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
        if rows else "<p class='muted'>Договоров пока нет — загрузите первый.</p>"
    )

    body = f"""
<h1>Договоры</h1>
{_error_box(error_msg)}
<div class="flex" style="margin-bottom:14px;">
  <input type="file" id="upload-file">
  <button type="button" id="upload-btn">Загрузить</button>
  <span class="muted" id="upload-status"></span>
</div>
{table}

<script>
(function(){{
  var btn = document.getElementById('upload-btn');
  var input = document.getElementById('upload-file');
  var status = document.getElementById('upload-status');
  btn.addEventListener('click', function(){{
    var f = input.files && input.files[0];
    if (!f) return;
    status.textContent = 'Загрузка…';
    fetch('/contract/upload?name=' + encodeURIComponent(f.name), {{
      method: 'POST',
      headers: {{'Content-Type': f.type || 'application/octet-stream'}},
      body: f
    }}).then(function(r){{ return r.json().then(function(d){{ return [r.ok, d]; }}); }})
      .then(function(res){{
        if (res[0]) {{ alert('Загружено: ' + f.name); window.location.reload(); }}
        else {{ status.textContent = ''; alert('Загрузка не удалась: ' + res[1].error); }}
      }})
      .catch(function(e){{ status.textContent = ''; alert('Загрузка не удалась: ' + e); }});
  }});
}})();
</script>
"""
    return layout("Договоры", body, active="/contracts")


def analysis_view(data: Iterable[Contract], *, today: date) -> bytes:
    """
    Статическая страница анализа: договоры с высоким и средним риском и их сроки.
    Автоматического разбора текста документов нет.
    """
    rows = []
    for c in data:
        if c.risk_level is RiskLevel.LOW:
            continue
        left = days_until(today, c.expiration_date)
        note = "истёк" if left < 0 else f"осталось {left} дн."
        rows.append(
            "<tr>"
            f"<td>{_esc(c.name)}</td>"
            f"<td>{_risk_cell(c.risk_level)}</td>"
            f"<td>Окончание {_esc(c.expiration_date)} ({note})</td>"
            "</tr>"
        )
    table = (
        "<table><thead><tr><th>Договор</th><th>Риск</th><th>Срок</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
        if rows else "<p class='muted'>Договоров с повышенным риском нет.</p>"
    )
    body = f"""
<h1>Анализ</h1>
<p class="muted">Автоматический анализ текста договоров пока недоступен.
Ниже — договоры, требующие внимания по срокам.</p>
{table}
"""
    return layout("Анализ", body, active="/analysis")


def settings_view(email: str) -> bytes:
    body = f"""
<h1>Настройки</h1>
<p>Вы вошли как <b>{_esc(email)}</b></p>
<form method="POST" action="/logout">
  <button type="submit">Выйти</button>
</form>
"""
    return layout("Настройки", body, active="/settings")


def not_found_view(msg: str = "Not Found") -> bytes:
    return layout("404", f"<h1>404</h1><p>{escape(msg)}</p>")
