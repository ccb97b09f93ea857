"""
Shared page shell: sidebar navigation, header, detail panel and the small
amount of browser script the pages need (detail panel + SSE refresh).
"""
from html import escape

NAV_ITEMS = [
    ('/', 'Dashboard'),
    ('/trades', 'Trades'),
    ('/signals', 'Signals'),
    ('/portfolio', 'Portfolio'),
    ('/performance', 'Performance'),
    ('/circuit-breaker', 'Circuit Breaker'),
    ('/mdse', 'MDSE'),
    ('/system', 'System'),
]

APP_TITLE = 'Crypto Trading Dashboard'


STYLES = """
  :root {
    --bg: #0d1117; --surface: #161b22; --border: #30363d;
    --text: #c9d1d9; --text-dim: #8b949e; --text-bright: #f0f6fc;
    --green: #3fb950; --red: #f85149; --yellow: #d29922; --orange: #db6d28;
    --blue: #58a6ff; --cyan: #39d2c0;
  }
  * { margin: 0; padding: 0; box-sizing: border-box; }
  body { background: var(--bg); color: var(--text); font-family: 'SF Mono', 'Fira Code', monospace; font-size: 13px; }
  .shell { display: flex; height: 100vh; }

  /* Sidebar */
  .sidebar { width: 224px; flex-shrink: 0; background: var(--surface); border-right: 1px solid var(--border); display: flex; flex-direction: column; }
  .sidebar .brand { padding: 18px 16px; border-bottom: 1px solid var(--border); }
  .sidebar .brand .title { font-size: 16px; font-weight: 700; color: var(--cyan); }
  .sidebar .brand .sub { font-size: 11px; color: var(--text-dim); margin-top: 2px; }
  .sidebar nav { padding: 12px 8px; }
  .sidebar nav a { display: block; padding: 8px 12px; border-radius: 6px; color: var(--text-dim); text-decoration: none; }
  .sidebar nav a:hover { background: #ffffff0a; color: var(--text-bright); }
  .sidebar nav a.active { background: #ffffff0f; color: var(--text-bright); }

  /* Main area */
  .main { flex: 1; display: flex; flex-direction: column; overflow: hidden; }
  .header { height: 56px; flex-shrink: 0; display: flex; align-items: center; padding: 0 24px; border-bottom: 1px solid var(--border); color: var(--text-dim); }
  .content { flex: 1; overflow: auto; padding: 24px; }
  .content h1 { font-size: 20px; color: var(--text-bright); margin-bottom: 16px; }
  .content h2 { font-size: 15px; color: var(--text-bright); margin-bottom: 12px; }
  .page-head { display: flex; justify-content: space-between; align-items: baseline; margin-bottom: 16px; }
  .page-head h1, .page-head h2 { margin-bottom: 0; }
  .subtitle { color: var(--text-dim); margin-top: -10px; margin-bottom: 20px; }
  .count { color: var(--text-dim); }
  section { margin-bottom: 28px; }

  /* Cards */
  .grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(220px, 1fr)); gap: 12px; margin-bottom: 20px; }
  .card { background: var(--surface); border: 1px solid var(--border); border-radius: 8px; padding: 14px; }
  .card h3 { font-size: 12px; color: var(--text-dim); text-transform: uppercase; letter-spacing: 0.5px; margin-bottom: 10px; }
  .card .label { font-size: 11px; color: var(--text-dim); text-transform: uppercase; letter-spacing: 0.5px; }
  .card .value { font-size: 20px; font-weight: 600; color: var(--text-bright); margin-top: 6px; }
  .card .value .unit, .card .value .sub { font-size: 12px; font-weight: 400; color: var(--text-dim); }
  .card.band-good { border-color: #3fb95055; }
  .card.band-bad { border-color: #f8514955; }
  .card.band-neutral { border-color: #d2992255; }
  .kv { display: grid; grid-template-columns: 1fr auto; gap: 6px 12px; }
  .kv .k { color: var(--text-dim); }
  .kv .v { text-align: right; }

  .pnl-pos, .good { color: var(--green); }
  .pnl-neg, .bad { color: var(--red); }
  .neutral { color: var(--yellow); }
  .muted { color: var(--text-dim); }
  .num { text-align: right; font-variant-numeric: tabular-nums; }

  /* Badges */
  .badge { display: inline-flex; align-items: center; gap: 6px; padding: 3px 10px; border-radius: 999px; font-size: 12px; font-weight: 600; border: 1px solid transparent; }
  .badge .dot { width: 8px; height: 8px; border-radius: 50%; background: currentColor; }
  .badge.lg { font-size: 16px; padding: 6px 14px; }
  .status-NORMAL, .status-OK { background: #3fb95018; border-color: #3fb9504d; }
  .status-WARNING, .status-DEGRADED { background: #d2992218; border-color: #d299224d; }
  .status-PAUSED { background: #db6d2818; border-color: #db6d284d; }
  .status-STOPPED, .status-DOWN { background: #f8514918; border-color: #f851494d; }
  .status-unreachable { background: #8b949e18; border-color: #8b949e4d; }
  .tone-NORMAL, .tone-OK { color: var(--green); }
  .tone-WARNING, .tone-DEGRADED { color: var(--yellow); }
  .tone-PAUSED { color: var(--orange); }
  .tone-STOPPED, .tone-DOWN { color: var(--red); }
  .tone-unreachable { color: var(--text-dim); }
  .side { display: inline-block; min-width: 40px; text-align: center; border-radius: 3px; padding: 1px 6px; font-size: 11px; font-weight: 700; }
  .side.buy { background: #3fb95022; color: var(--green); }
  .side.sell { background: #f8514922; color: var(--red); }
  .side.other { background: #ffffff0f; color: var(--text-dim); }
  .tag { display: inline-block; border-radius: 3px; padding: 1px 6px; font-size: 11px; background: #ffffff0f; }

  /* Tables */
  .table-wrap { overflow-x: auto; border: 1px solid var(--border); border-radius: 8px; }
  table { width: 100%; border-collapse: collapse; font-size: 12px; }
  th { text-align: left; color: var(--text-dim); padding: 8px 12px; border-bottom: 1px solid var(--border); background: var(--surface); font-size: 10px; text-transform: uppercase; letter-spacing: 0.3px; }
  td { padding: 7px 12px; border-bottom: 1px solid #ffffff08; }
  tr:hover td { background: #ffffff06; }
  tr[data-detail] { cursor: pointer; }
  .pos-empty { color: var(--text-dim); text-align: center; padding: 20px; font-style: italic; }

  /* Lists */
  .feed-item { display: flex; align-items: center; gap: 12px; padding: 10px 14px; border: 1px solid var(--border); border-radius: 6px; background: var(--surface); margin-bottom: 6px; }
  .feed-item .grow { flex: 1; min-width: 0; }
  .feed-item .time { color: var(--text-dim); font-size: 11px; }
  .bar { height: 6px; border-radius: 3px; background: #ffffff0f; }
  .bar > div { height: 6px; border-radius: 3px; }
  .bar > .good { background: var(--green); }
  .bar > .neutral { background: var(--yellow); }
  .bar > .bad { background: var(--red); }

  /* States */
  .loading { color: var(--text-dim); text-align: center; padding: 48px; }
  .error-box { color: var(--red); text-align: center; padding: 48px; }
  .error-box .hint { color: var(--text-dim); font-size: 11px; margin-top: 4px; }
  .error-inline { color: var(--red); }
  .error-inline .hint { color: var(--text-dim); font-size: 11px; margin-top: 4px; }
  .skeleton { background: #ffffff0f; border-radius: 6px; animation: pulse 1.5s ease-in-out infinite; }
  @keyframes pulse { 50% { opacity: 0.4; } }
  .panel { border: 1px solid var(--border); border-radius: 10px; padding: 20px; margin-bottom: 20px; background: #161b2280; }
  .panel .panel-label { font-size: 11px; color: var(--text-dim); text-transform: uppercase; letter-spacing: 0.5px; margin-bottom: 10px; }

  /* Detail panel */
  .detail-overlay { position: fixed; inset: 0; z-index: 50; }
  .detail-overlay[hidden] { display: none; }
  .detail-backdrop { position: absolute; inset: 0; background: #00000099; border: 0; width: 100%; cursor: default; }
  .detail-panel { position: absolute; top: 0; right: 0; height: 100%; width: 100%; max-width: 560px; background: var(--surface); border-left: 1px solid var(--border); }
  .detail-panel header { display: flex; justify-content: space-between; align-items: center; padding: 16px 20px; border-bottom: 1px solid var(--border); }
  .detail-panel header h2 { font-size: 16px; color: var(--text-bright); }
  .detail-close { background: none; border: 0; color: var(--text-dim); font-size: 20px; cursor: pointer; }
  .detail-body { padding: 20px; overflow-y: auto; height: calc(100% - 60px); }
  .detail-row { display: flex; justify-content: space-between; gap: 16px; padding-bottom: 8px; margin-bottom: 10px; border-bottom: 1px solid #30363db0; }
  .detail-row .k { color: var(--text-dim); }
  .detail-row .v { text-align: right; color: var(--text-bright); }

  .button { background: var(--green); color: #fff; border: 0; border-radius: 6px; padding: 8px 16px; font: inherit; cursor: pointer; }
"""


SCRIPT = """
(function () {
  var overlay = document.getElementById('detail-overlay');

  function onKeyDown(e) {
    if (e.key === 'Escape') closeDetail();
  }

  function openDetail(row) {
    var tpl = document.getElementById(row.dataset.detail);
    if (!tpl || !overlay) return;
    document.getElementById('detail-title').textContent = row.dataset.detailTitle || 'Details';
    var body = document.getElementById('detail-body');
    body.innerHTML = '';
    body.appendChild(tpl.content.cloneNode(true));
    overlay.hidden = false;
    document.addEventListener('keydown', onKeyDown);
  }

  function closeDetail() {
    if (overlay) overlay.hidden = true;
    document.removeEventListener('keydown', onKeyDown);
  }

  document.addEventListener('click', function (e) {
    if (e.target.closest('.detail-backdrop, .detail-close')) {
      closeDetail();
      return;
    }
    var row = e.target.closest('[data-detail]');
    if (row) openDetail(row);
  });
  window.addEventListener('pagehide', closeDetail);

  // Polled pages: replace the live region with each fragment pushed by the server
  var live = document.querySelector('[data-stream]');
  if (live && window.EventSource) {
    var source = new EventSource(live.dataset.stream);
    source.onmessage = function (e) {
      var msg = JSON.parse(e.data);
      if (msg.html) live.innerHTML = msg.html;
    };
    window.addEventListener('pagehide', function () { source.close(); });
  }
})();
"""


def esc(value) -> str:
    return escape(str(value), quote=True)


def render_nav(active_path: str) -> str:
    links = []
    for href, label in NAV_ITEMS:
        cls = ' class="active"' if href == active_path else ''
        links.append(f'<a href="{href}"{cls}>{esc(label)}</a>')
    return '\n      '.join(links)


def render_detail_overlay() -> str:
    return (
        '<div id="detail-overlay" class="detail-overlay" hidden>'
        '<button type="button" class="detail-backdrop" aria-label="Close details panel"></button>'
        '<aside class="detail-panel" role="dialog" aria-modal="true">'
        '<header><h2 id="detail-title"></h2>'
        '<button type="button" class="detail-close" aria-label="Close panel">&times;</button></header>'
        '<div id="detail-body" class="detail-body"></div>'
        '</aside></div>'
    )


def render_page(active_path: str, content: str, stream_url: str = None) -> str:
    """Wrap a page body in the shell. `stream_url` marks the body as an SSE live region."""
    if stream_url:
        body = f'<div id="live" data-stream="{esc(stream_url)}">{content}</div>'
    else:
        body = content
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{APP_TITLE}</title>
<style>{STYLES}</style>
</head>
<body>
<div class="shell">
  <aside class="sidebar">
    <div class="brand"><div class="title">Crypto Trading</div><div class="sub">Dashboard</div></div>
    <nav>
      {render_nav(active_path)}
    </nav>
  </aside>
  <div class="main">
    <header class="header">{APP_TITLE}</header>
    <main class="content">
{body}
    </main>
  </div>
</div>
{render_detail_overlay()}
<script>{SCRIPT}</script>
</body>
</html>"""


def render_error_content(message: str = None) -> str:
    """Recovery view for the content region when a page fails to render."""
    text = message or 'An unexpected error occurred.'
    return (
        '<div class="panel" style="max-width:420px;margin:48px auto;text-align:center">'
        '<h2>Something went wrong</h2>'
        f'<p class="muted" style="margin:8px 0 16px">{esc(text)}</p>'
        '<button type="button" class="button" onclick="window.location.reload()">Reload page</button>'
        '</div>'
    )


def render_error_boundary(active_path: str, message: str = None) -> str:
    return render_page(active_path, render_error_content(message))
