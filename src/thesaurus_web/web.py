from __future__ import annotations
import argparse
import logging
import os
from typing import List, Optional

from flask import Flask, Response, jsonify, request

from thesaurus import config as CFG
from thesaurus.config import Options
from thesaurus.engine import DictionarySession, Session
from thesaurus.errors import ConfigError
from thesaurus.loader import discover_archives

log = logging.getLogger(__name__)

app = Flask(__name__)
_session: Session | None = None

_MODES = ("strict", "regexp", "normalize", "foldcase")


# ---------- helpers ----------

class _NotFound(Exception):
    pass


def _ctx(name: Optional[str]) -> DictionarySession:
    if _session is None or not _session.ok:
        raise _NotFound("no dictionary loaded")
    try:
        return _session.get(name or None)
    except KeyError:
        raise _NotFound(f"no dictionary {name!r}") from None


@app.errorhandler(_NotFound)
def _not_found(exc: _NotFound):
    return jsonify({"error": str(exc)}), 404


def _page_data(ctx: DictionarySession, lines: Optional[List[str]]) -> dict:
    start, end = ctx.get_position()
    return {
        "dict": ctx.name,
        "query": ctx.query,
        "match": bool(ctx.query),
        "lines": lines or [],
        "start": list(start),
        "end": list(end),
    }


def _page(ctx: DictionarySession, lines: Optional[List[str]]):
    return jsonify(_page_data(ctx, lines))


def _lines_arg() -> int:
    return request.args.get("lines", CFG.PAGE_LINES, type=int) or CFG.PAGE_LINES


# ---------- API ----------

@app.get("/api/health")
def api_health():
    n = len(_session.names()) if _session is not None else 0
    return jsonify({"ok": n > 0, "dictionaries": n})


@app.get("/api/dicts")
def api_dicts():
    if _session is None:
        return jsonify({"dictionaries": [], "failures": {}})
    rows = [{
        "name": name,
        "title": ctx.dictionary.title,
        "entries": ctx.dictionary.catalog.count(),
        "selected": name == _session.selected,
    } for name, ctx in _session.contexts.items()]
    failures = {name: str(exc) for name, exc in _session.failures.items()}
    return jsonify({"dictionaries": rows, "failures": failures})


@app.get("/api/search")
def api_search():
    ctx = _ctx(request.args.get("dict"))
    q = request.args.get("q", "", type=str)
    if not q.strip() or _session.search(q, ctx.name) is None:
        return _page(ctx, [])
    return _page(ctx, ctx.scroll(_lines_arg()))


@app.get("/api/scroll")
def api_scroll():
    ctx = _ctx(request.args.get("dict"))
    count = request.args.get("count", CFG.PAGE_LINES, type=int) or CFG.PAGE_LINES
    increment = request.args.get("increment", 0, type=int)
    return _page(ctx, ctx.scroll(count, increment))


@app.get("/api/repeat")
def api_repeat():
    ctx = _ctx(request.args.get("dict"))
    return _page(ctx, ctx.repeat(_lines_arg()))


@app.get("/api/entry")
def api_entry():
    ctx = _ctx(request.args.get("dict"))
    delta = request.args.get("delta", 1, type=int)
    return _page(ctx, ctx.jump_entries(delta, _lines_arg()))


@app.get("/api/find")
def api_find():
    ctx = _ctx(request.args.get("dict"))
    term = request.args.get("term", "", type=str)
    regexp = request.args.get("regexp", "0") in ("1", "true", "on")
    spans = ctx.search_visible(term, as_regex=regexp)
    return jsonify({"dict": ctx.name, "spans": [list(s) for s in spans]})


@app.post("/api/mode")
def api_mode():
    body = request.get_json(silent=True) or {}
    ctx = _ctx(body.get("dict"))
    for key in _MODES:
        if key in body:
            getattr(ctx, f"set_{key}")(bool(body[key]))
    lines = ctx.scroll(int(body.get("lines") or CFG.PAGE_LINES)) if ctx.query else []
    data = _page_data(ctx, lines)
    data["options"] = {key: getattr(ctx.options, key) for key in _MODES}
    return jsonify(data)


# ---------- UI ----------

@app.get("/")
def home():
    html = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width,initial-scale=1" />
<title>Thesaurus</title>
<style>
:root{ --bg:#0b0f14; --panel:#0f141b; --ink:#cfd8e3; --muted:#8a94a6; --accent:#6ee7ff; --border:#1c2530; }
*{box-sizing:border-box}
body{ margin:0; background:var(--bg); color:var(--ink); font:16px/1.45 system-ui,sans-serif; }
.container{ max-width:980px; margin:24px auto; padding:0 16px; }
.card{ background:var(--panel); border:1px solid var(--border); border-radius:16px; padding:18px; }
.controls{ display:flex; gap:10px; flex-wrap:wrap; margin:8px 0; }
input,select,button{ padding:10px 12px; border-radius:10px; border:1px solid var(--border);
  background:#0b1117; color:var(--ink); font-size:15px; }
#q{ flex:1; min-width:220px }
pre{ white-space:pre; overflow-x:auto; font-family:ui-monospace,Menlo,Consolas,monospace; }
.t{ color:#facc15; font-weight:600 } .b{ color:#f87171; font-weight:600 } .i{ color:#4ade80 }
.meta{ color:var(--muted); font-size:13px }
</style>
</head>
<body>
<div class="container"><div class="card">
  <h1>Thesaurus</h1>
  <div class="controls">
    <select id="dict"></select>
    <input id="q" type="text" placeholder="Look up a word…" autocomplete="off" autofocus />
    <button id="prev">▲ Page</button><button id="next">▼ Page</button>
    <button id="pe">◀ Entry</button><button id="ne">Entry ▶</button>
  </div>
  <div class="meta" id="stats">Ready.</div>
  <pre id="out"></pre>
</div></div>
<script>
const $ = (s) => document.querySelector(s);
const LINES = 30;
function esc(s){ return s.replace(/&/g,"&amp;").replace(/</g,"&lt;").replace(/>/g,"&gt;"); }
function markup(s){
  return esc(s).replace(/&lt;(\/?)([bit])&gt;/g, (m, c, t) => c ? "</span>" : `<span class="${t}">`)
               .replace(/&lt;\/?font.*?&gt;/g, "");
}
function show(data){
  $("#out").innerHTML = (data.lines || []).map(markup).join("\n");
  $("#stats").textContent = data.match ? `${data.dict}: ${data.query}` : "No match.";
}
async function call(path){
  const d = encodeURIComponent($("#dict").value);
  const r = await fetch(`${path}${path.includes("?") ? "&" : "?"}dict=${d}`);
  show(await r.json());
}
$("#q").addEventListener("keydown", (e) => {
  if(e.key === "Enter") call(`/api/search?q=${encodeURIComponent($("#q").value)}&lines=${LINES}`);
});
$("#next").onclick = () => call(`/api/scroll?count=${LINES}`);
$("#prev").onclick = () => call(`/api/scroll?count=${-LINES}`);
$("#ne").onclick = () => call(`/api/entry?delta=1&lines=${LINES}`);
$("#pe").onclick = () => call(`/api/entry?delta=-1&lines=${LINES}`);
fetch("/api/dicts").then(r => r.json()).then(data => {
  $("#dict").innerHTML = data.dictionaries.map(d =>
    `<option value="${esc(d.name)}" ${d.selected ? "selected" : ""}>${esc(d.title || d.name)}</option>`).join("");
});
</script>
</body>
</html>
"""
    return Response(html, mimetype="text/html")


# ---------- entry point ----------

def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Thesaurus web UI (Flask)")
    ap.add_argument("--dict", dest="dicts", action="append", default=[], metavar="NAME=PATH")
    ap.add_argument("--dir", dest="dirs", action="append", default=[])
    ap.add_argument("--width", type=int, default=100)
    ap.add_argument("--strict", action="store_true")
    ap.add_argument("--regexp", action="store_true")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    if args.verbose or os.environ.get("THESAURUS_VERBOSE") == "1":
        logging.basicConfig(level=logging.INFO)

    specs = []
    for value in args.dicts:
        name, sep, path = value.partition("=")
        if not sep or not name:
            ap.error(f"--dict expects NAME=PATH, got {value!r}")
        specs.append((name, path or "."))
    for d in args.dirs:
        specs.extend(discover_archives(d))
    if not specs:
        ap.error("give at least one --dict NAME=PATH or --dir DIR")

    try:
        options = Options(width=args.width, strict=args.strict, regexp=args.regexp)
    except ConfigError as exc:
        ap.error(str(exc))

    global _session
    _session = Session.open(specs, options)
    for name, exc in _session.failures.items():
        log.warning("Dictionary %s not loaded: %s", name, exc)
    if not _session.ok:
        log.error("No dictionary could be loaded")
        return 1

    try:
        app.run(host=args.host, port=args.port, debug=args.verbose)
    finally:
        _session.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
