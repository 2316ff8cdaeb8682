"""
HTML pages served by the web app.

The browser side stays small: it renders toasts returned by the JSON API,
submits the forms with fetch, and asks navigator.geolocation for the user's
position.
"""

import html
from typing import Dict

from conecta_rua.core.config import settings
from conecta_rua.core.constants import (
    ALL_CATEGORIES,
    APP_TITLE,
    CITY_NAME,
    category_options,
)
from conecta_rua.reports.detail import (
    EMPTY_THREAD_MESSAGE,
    LOGIN_TO_COMMENT_MESSAGE,
    ReportDetail,
    format_date,
)
from conecta_rua.reports.session import SessionHeader
from conecta_rua.reports.store import ReportStore

BASE_STYLE = """
    body { font-family: Arial, sans-serif; margin: 0; background: #f8fafc; color: #111827; }
    header { position: sticky; top: 0; z-index: 1001; background: rgba(255,255,255,0.95);
             border-bottom: 1px solid #e5e7eb; box-shadow: 0 1px 2px rgba(0,0,0,0.05); }
    .bar { max-width: 1200px; margin: 0 auto; padding: 0 16px; height: 64px;
           display: flex; align-items: center; justify-content: space-between; }
    .brand { display: flex; align-items: center; gap: 8px; text-decoration: none; color: inherit; }
    .logo { width: 32px; height: 32px; background: #2563eb; border-radius: 8px; color: white;
            font-weight: bold; font-size: 13px; display: flex; align-items: center; justify-content: center; }
    .brand h1 { margin: 0; font-size: 20px; color: #2563eb; }
    .brand p { margin: 0; font-size: 12px; color: #6b7280; }
    .avatar { width: 40px; height: 40px; border-radius: 50%; background: #2563eb; color: white;
              display: inline-flex; align-items: center; justify-content: center; font-weight: bold; }
    button, .button { background: #2563eb; color: white; border: 0; border-radius: 6px;
                      padding: 8px 14px; cursor: pointer; font-size: 14px; }
    button.secondary { background: white; color: #111827; border: 1px solid #d1d5db; }
    button:disabled { opacity: 0.6; cursor: default; }
    .controls { display: flex; justify-content: space-between; align-items: center;
                max-width: 1200px; margin: 12px auto; padding: 0 16px; }
    .map { height: calc(100vh - 140px); }
    .map iframe { border: 0; }
    dialog { border: 0; border-radius: 10px; padding: 24px; width: min(640px, 90vw); }
    label { display: block; font-size: 14px; font-weight: bold; margin: 12px 0 4px; }
    input, textarea, select { width: 100%; box-sizing: border-box; padding: 8px;
                              border: 1px solid #d1d5db; border-radius: 6px; font-size: 14px; }
    .row { display: flex; gap: 8px; }
    .hint { font-size: 12px; color: #6b7280; }
    .card { max-width: 960px; margin: 24px auto; background: white; border-radius: 10px;
            padding: 24px; box-shadow: 0 1px 3px rgba(0,0,0,0.1); }
    .badge { display: inline-block; border-radius: 999px; padding: 2px 10px; font-size: 12px; font-weight: bold; }
    .meta { display: flex; gap: 16px; font-size: 14px; color: #6b7280; margin: 8px 0 16px; }
    .photos { display: grid; grid-template-columns: repeat(auto-fill, minmax(220px, 1fr)); gap: 12px; }
    .photos img { width: 100%; height: 192px; object-fit: cover; border-radius: 8px; border: 1px solid #e5e7eb; }
    .photo-list { display: flex; flex-wrap: wrap; gap: 8px; margin-top: 8px; }
    .photo-list div { position: relative; }
    .photo-list img { width: 64px; height: 64px; object-fit: cover; border-radius: 6px; }
    .photo-list button { position: absolute; top: -6px; right: -6px; padding: 0 6px; border-radius: 999px; }
    .comment { background: #f3f4f6; border-radius: 8px; padding: 12px; margin-bottom: 12px; }
    .comment-head { display: flex; justify-content: space-between; font-size: 13px; margin-bottom: 6px; }
    .muted { color: #6b7280; text-align: center; padding: 16px; background: #f9fafb; border-radius: 8px; }
    #toasts { position: fixed; bottom: 20px; left: 50%; transform: translateX(-50%); z-index: 10000; }
    .toast { margin-top: 8px; padding: 10px 16px; border-radius: 6px; color: white; font-size: 14px; min-width: 260px; }
    .toast.success { background: #16a34a; } .toast.error { background: #dc2626; }
    .toast.info { background: #2563eb; } .toast.warning { background: #d97706; }
"""

BASE_SCRIPT = """
function showToasts(items) {
  const box = document.getElementById('toasts');
  (items || []).forEach(function (t) {
    const el = document.createElement('div');
    el.className = 'toast ' + t.level;
    el.textContent = t.message;
    box.appendChild(el);
    setTimeout(function () { el.remove(); }, 4000);
  });
}
async function sendJson(url, payload) {
  const response = await fetch(url, {
    method: 'POST', headers: {'Content-Type': 'application/json'},
    body: JSON.stringify(payload || {}), credentials: 'same-origin'
  });
  const body = await response.json().catch(function () { return {}; });
  showToasts(body.notifications);
  return {ok: response.ok, body: body};
}
async function login(event) {
  event.preventDefault();
  const form = event.target;
  const result = await sendJson('/api/v1/auth/login', {email: form.email.value, password: form.password.value});
  if (result.ok) { setTimeout(function () { location.reload(); }, 600); }
}
async function signup(event) {
  event.preventDefault();
  const form = event.target.form;
  await sendJson('/api/v1/auth/signup', {
    email: form.email.value, password: form.password.value, full_name: form.full_name.value
  });
}
async function logout() {
  await sendJson('/api/v1/auth/logout');
  location.reload();
}
"""


def _page(title: str, body: str, script: str = "") -> str:
    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{html.escape(title)}</title>
    <style>{BASE_STYLE}</style>
</head>
<body>
{body}
<div id="toasts"></div>
<script>{BASE_SCRIPT}{script}</script>
</body>
</html>"""


def render_header(header: SessionHeader) -> str:
    """Brand on the left; the user's avatar menu or the login button on the right."""
    if header.is_authenticated:
        session = header.session
        account = f"""
            <span class="avatar" title="{html.escape(session.email or '', quote=True)}">{html.escape(session.avatar_initial)}</span>
            <div style="font-size: 13px;">
                <div><b>{html.escape(session.display_name)}</b></div>
                <div class="hint">{html.escape(session.email or '')}</div>
            </div>
            <button class="secondary" onclick="logout()">Sair</button>
        """
    else:
        account = '<button onclick="document.getElementById(\'auth-dialog\').showModal()">Entrar</button>'

    return f"""
<header>
    <div class="bar">
        <a class="brand" href="/">
            <div class="logo">CR</div>
            <div><h1>{APP_TITLE}</h1><p>{CITY_NAME}</p></div>
        </a>
        <div style="display: flex; align-items: center; gap: 12px;">{account}</div>
    </div>
</header>
<dialog id="auth-dialog">
    <form onsubmit="login(event)">
        <h2 style="margin-top: 0;">Entrar</h2>
        <label for="email">Email</label>
        <input id="email" name="email" type="email" required>
        <label for="password">Senha</label>
        <input id="password" name="password" type="password" required>
        <label for="full_name">Nome completo (apenas cadastro)</label>
        <input id="full_name" name="full_name" type="text">
        <div class="row" style="margin-top: 16px;">
            <button type="button" class="secondary" onclick="document.getElementById('auth-dialog').close()">Cancelar</button>
            <button type="button" class="secondary" onclick="signup(event)">Criar conta</button>
            <button type="submit">Entrar</button>
        </div>
    </form>
</dialog>
"""


def _category_select(store: ReportStore) -> str:
    counts: Dict[str, int] = store.count_by_category()
    options = []
    for option in category_options(include_all=True):
        value = option["value"]
        label = option["label"]
        if value == ALL_CATEGORIES:
            label = f"{label} ({len(store.reports)})"
        else:
            label = f"{label} ({counts.get(value, 0)})"
        selected = " selected" if value == store.selected_category else ""
        options.append(f'<option value="{value}"{selected}>{html.escape(label)}</option>')
    return "".join(options)


def _create_dialog() -> str:
    options = "".join(
        f'<option value="{o["value"]}">{html.escape(o["label"])}</option>'
        for o in category_options()
    )
    return f"""
<dialog id="create-dialog">
    <form id="create-form" onsubmit="createReport(event)">
        <h2 style="margin-top: 0;">Nova Denúncia</h2>
        <label for="title">Título *</label>
        <input id="title" name="title" placeholder="Ex: Buraco grande na Rua das Flores" required>
        <label for="category">Categoria *</label>
        <select id="category" name="category" required>
            <option value="">Selecione a categoria do problema</option>{options}
        </select>
        <label for="description">Descrição *</label>
        <textarea id="description" name="description" rows="4" placeholder="Descreva o problema em detalhes..." required></textarea>
        <label>Localização</label>
        <div class="row">
            <input name="latitude" type="number" step="any" value="{settings.default_latitude}">
            <input name="longitude" type="number" step="any" value="{settings.default_longitude}">
            <button type="button" class="secondary" onclick="useCurrentLocation()">📍</button>
        </div>
        <p class="hint">Clique no ícone de localização para usar sua posição atual</p>
        <label for="photos">Fotos (máx. {settings.max_images})</label>
        <input id="photos" name="photos" type="file" accept="image/*" multiple onchange="selectPhotos(this)">
        <div id="photo-list" class="photo-list"></div>
        <div class="row" style="margin-top: 16px;">
            <button type="button" class="secondary" onclick="document.getElementById('create-dialog').close()">Cancelar</button>
            <button type="submit" id="create-submit">Criar Denúncia</button>
        </div>
    </form>
</dialog>
"""


INDEX_SCRIPT = """
function openCreate(authenticated) {
  if (!authenticated) { document.getElementById('auth-dialog').showModal(); return; }
  document.getElementById('create-dialog').showModal();
}
function useCurrentLocation() {
  const form = document.getElementById('create-form');
  const report = function (payload) {
    sendJson('/api/v1/location', payload).then(function (result) {
      form.latitude.value = result.body.latitude;
      form.longitude.value = result.body.longitude;
    });
  };
  if (!navigator.geolocation) { report({error: 'unsupported'}); return; }
  const codes = {1: 'permission_denied', 2: 'position_unavailable', 3: 'timeout'};
  navigator.geolocation.getCurrentPosition(
    function (p) { report({latitude: p.coords.latitude, longitude: p.coords.longitude, accuracy_m: p.coords.accuracy}); },
    function (e) { report({error: codes[e.code] || 'position_unavailable'}); },
    {enableHighAccuracy: true, timeout: GEOLOCATION_TIMEOUT_MS}
  );
}
let pendingPhotos = [];
function photoInfo(file) {
  return {filename: file.name, content_type: file.type, size: file.size};
}
async function updatePhotos(added, removeIndex) {
  const candidates = pendingPhotos.concat(added);
  const result = await sendJson('/api/v1/photos/selection', {
    pending: pendingPhotos.map(photoInfo), added: added.map(photoInfo),
    remove: removeIndex === undefined ? null : removeIndex
  });
  if (result.ok) {
    pendingPhotos = result.body.kept.map(function (i) { return candidates[i]; });
  }
  const transfer = new DataTransfer();
  pendingPhotos.forEach(function (file) { transfer.items.add(file); });
  document.getElementById('photos').files = transfer.files;
  renderPhotos();
}
function selectPhotos(input) {
  updatePhotos(Array.from(input.files));
}
function removePhoto(index) {
  updatePhotos([], index);
}
function renderPhotos() {
  const list = document.getElementById('photo-list');
  list.replaceChildren();
  pendingPhotos.forEach(function (file, i) {
    const item = document.createElement('div');
    const img = document.createElement('img');
    img.src = URL.createObjectURL(file); img.alt = file.name;
    const button = document.createElement('button');
    button.type = 'button'; button.className = 'secondary'; button.textContent = '×';
    button.onclick = function () { removePhoto(i); };
    item.append(img, button);
    list.append(item);
  });
}
async function createReport(event) {
  event.preventDefault();
  const button = document.getElementById('create-submit');
  button.disabled = true; button.textContent = 'Criando...';
  try {
    const response = await fetch('/api/v1/reports', {
      method: 'POST', body: new FormData(event.target), credentials: 'same-origin'
    });
    const body = await response.json().catch(function () { return {}; });
    showToasts(body.notifications);
    if (response.ok) { setTimeout(function () { location.reload(); }, 800); }
  } finally {
    button.disabled = false; button.textContent = 'Criar Denúncia';
  }
}
"""


def render_index_page(header: SessionHeader, store: ReportStore, map_html: str) -> str:
    """Main page: header, category filter, "Nova Denúncia" and the map."""
    authenticated = "true" if header.is_authenticated else "false"
    body = f"""
{render_header(header)}
<main>
    <div class="controls">
        <form method="get" action="/">
            <select name="category" onchange="this.form.submit()" style="width: 240px;">
                {_category_select(store)}
            </select>
        </form>
        <button onclick="openCreate({authenticated})">+ Nova Denúncia</button>
    </div>
    <div class="map">{map_html}</div>
</main>
{_create_dialog()}
"""
    timeout_ms = int(settings.geolocation_timeout_seconds * 1000)
    script = f"const GEOLOCATION_TIMEOUT_MS = {timeout_ms};\n{INDEX_SCRIPT}"
    return _page(APP_TITLE, body, script)


def render_report_page(header: SessionHeader, detail: ReportDetail) -> str:
    """Detail page: report data, photos and the comment thread."""
    report = detail.report
    background, text = detail.badge_colors

    photos = ""
    if report.image_urls:
        images = "".join(
            f'<a href="{html.escape(url, quote=True)}" target="_blank">'
            f'<img src="{html.escape(url, quote=True)}" alt="Foto {index}"></a>'
            for index, url in enumerate(report.image_urls, start=1)
        )
        photos = f'<h3>Fotos ({len(report.image_urls)})</h3><div class="photos">{images}</div>'

    if detail.comments:
        thread = "".join(
            f"""<div class="comment">
                <div class="comment-head"><b>{html.escape(c.user_name)}</b>
                <span class="hint">{format_date(c.created_at)}</span></div>
                <div>{html.escape(c.content)}</div></div>"""
            for c in detail.comments
        )
    else:
        thread = f'<p class="muted">{EMPTY_THREAD_MESSAGE}</p>'

    if detail.can_comment:
        composer = f"""
        <form onsubmit="addComment(event)">
            <textarea name="content" rows="3" placeholder="Adicione um comentário..."></textarea>
            <button type="submit" id="comment-submit" style="width: 100%; margin-top: 8px;">Adicionar Comentário</button>
        </form>"""
    else:
        composer = f'<p class="muted">{LOGIN_TO_COMMENT_MESSAGE}</p>'

    body = f"""
{render_header(header)}
<div class="card">
    <p><a href="/">&larr; Voltar ao mapa</a></p>
    <div style="display: flex; justify-content: space-between; align-items: flex-start;">
        <h2 style="margin: 0;">{html.escape(report.title)}</h2>
        <span class="badge" style="background: {background}; color: {text};">{html.escape(report.category_label)}</span>
    </div>
    <div class="meta">
        <span>👤 {html.escape(report.user_name)}</span>
        <span>📅 {detail.created_at_display}</span>
        <span>📍 {detail.coordinates_display}</span>
    </div>
    <h3>Descrição</h3>
    <p>{html.escape(report.description)}</p>
    {photos}
    <hr>
    <h3>💬 Comentários ({len(detail.comments)})</h3>
    {thread}
    {composer}
</div>
"""
    script = f"""
async function addComment(event) {{
  event.preventDefault();
  const button = document.getElementById('comment-submit');
  button.disabled = true; button.textContent = 'Enviando...';
  const result = await sendJson('/api/v1/reports/{html.escape(report.id, quote=True)}/comments',
                                {{content: event.target.content.value}});
  button.disabled = false; button.textContent = 'Adicionar Comentário';
  if (result.ok) {{ setTimeout(function () {{ location.reload(); }}, 600); }}
}}
"""
    return _page(f"{report.title} - {APP_TITLE}", body, script)
