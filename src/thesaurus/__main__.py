from __future__ import annotations
import argparse, logging, os, re, sys
from typing import List, Optional, Sequence, Tuple

from . import config as CFG
from .config import Options
from .engine import DictionarySession, Session
from .errors import ConfigError
from .loader import discover_archives

_MARK_RE = re.compile(r"<(/?)([bit])>|</?font.*?>", re.S)
_COLORS = {"t": "1;33", "b": "1;31", "i": "1;32"}

CSI = "\033["

def _supports_color() -> bool:
    return sys.stdout.isatty() and os.environ.get("NO_COLOR", "") == ""

def _c(text: str, code: str, color: bool) -> str:
    if not color: return text
    return f"{CSI}{code}m{text}{CSI}0m"

def render_markup(line: str, color: bool) -> str:
    """Turn <t>/<b>/<i> markers into ANSI colours, or drop them."""
    if not color:
        return _MARK_RE.sub("", line)
    def sub(m: re.Match) -> str:
        if m.group(2) is None:
            return ""
        return f"{CSI}0m" if m.group(1) else f"{CSI}{_COLORS[m.group(2)]}m"
    return _MARK_RE.sub(sub, line)

def highlight(lines: Sequence[str], spans: Sequence[Tuple[int, int, int]], color: bool) -> List[str]:
    """Mark search spans in marker-free lines (inverse video, or [brackets])."""
    out = [_MARK_RE.sub("", ln) for ln in lines]
    for i, a, b in sorted(spans, reverse=True):
        ln = out[i]
        hit = _c(ln[a:b], "7", color) if color else f"[{ln[a:b]}]"
        out[i] = ln[:a] + hit + ln[b:]
    return out

def _print_lines(lines: Optional[List[str]], color: bool, empty: str = "(end)") -> None:
    if lines is None:
        print(_c(empty, "2;37", color)); return
    for ln in lines:
        print(render_markup(ln, color))

def _parse_dict(value: str) -> Tuple[str, str]:
    name, sep, path = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=PATH, got {value!r}")
    return name, path or "."

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="thesaurus", description="Dictionaries on the command line")
    p.add_argument("--dict", dest="dicts", action="append", type=_parse_dict, default=[],
                   metavar="NAME=PATH", help="Dictionary NAME in directory PATH (repeatable)")
    p.add_argument("--dir", dest="dirs", action="append", default=[],
                   help="Open every archive found in DIR (repeatable)")
    p.add_argument("-q", "--query", default=None, help="Single query to run once")
    p.add_argument("--lines", type=int, default=CFG.PAGE_LINES, help="Page size")
    p.add_argument("--width", type=int, default=0, help="Output width (default: terminal)")
    p.add_argument("--strict", action="store_true")
    p.add_argument("--regexp", action="store_true")
    p.add_argument("--no-normalize", action="store_true")
    p.add_argument("--foldcase", action="store_true")
    p.add_argument("--no-header", action="store_true")
    p.add_argument("--entryload", type=int, default=CFG.ENTRYLOAD)
    p.add_argument("--lmargin", type=int, default=CFG.LMARGIN)
    p.add_argument("--rmargin", type=int, default=CFG.RMARGIN)
    p.add_argument("--color", action="store_true", help="Colour inline markup on a TTY")
    p.add_argument("--verbose", action="store_true")
    return p

HELP = ("Commands: <word> search, :n/:p page, :j/:k line, :next/:prev entry, :r redraw,\n"
        "          /term highlight, :strict :regexp :normalize :foldcase toggle,\n"
        "          :dict NAME, :dicts, :reset, :q quit")

def repl(session: Session, page: int, color: bool) -> None:
    print(f"Type a word and press Enter (empty line to quit).  [{session.selected}]")
    print(_c(HELP, "2;37", color))
    while True:
        try:
            raw = input("> ")
        except (EOFError, KeyboardInterrupt):
            print(); break
        cmd = raw.strip()
        if cmd in ("", ":q"):
            print("Goodbye!"); break
        ctx: DictionarySession = session.current

        if cmd == ":n":
            _print_lines(ctx.scroll(page), color)
        elif cmd == ":p":
            _print_lines(ctx.scroll(-page), color, "(top)")
        elif cmd == ":j":
            _print_lines(ctx.scroll(page, 1), color)
        elif cmd == ":k":
            _print_lines(ctx.scroll(page, -1), color, "(top)")
        elif cmd == ":next":
            _print_lines(ctx.jump_entries(1, page), color)
        elif cmd == ":prev":
            _print_lines(ctx.jump_entries(-1, page), color, "(top)")
        elif cmd == ":r":
            _print_lines(ctx.repeat(page), color)
        elif cmd == ":reset":
            ctx.reset(); print(_c("(reset)", "2;36", color))
        elif cmd == ":dicts":
            for name in session.names():
                mark = "*" if name == session.selected else " "
                print(f"{mark} {name:<20} {session.contexts[name].dictionary.title}")
        elif cmd.startswith(":dict "):
            name = cmd.split(None, 1)[1]
            try:
                session.select(name); print(_c(f"({name})", "2;36", color))
            except KeyError:
                print(_c(f"(no dictionary {name!r})", "2;31", color))
        elif cmd in (":strict", ":regexp", ":normalize", ":foldcase"):
            flag = cmd[1:]
            new = not getattr(ctx.options, flag)
            getattr(ctx, f"set_{flag}")(new)
            print(_c(f"({flag} {'on' if new else 'off'})", "2;36", color))
            if ctx.query:
                _print_lines(ctx.scroll(page), color)
        elif cmd.startswith("/"):
            spans = ctx.search_visible(cmd[1:], as_regex=ctx.options.regexp)
            if not spans:
                print(_c("(not on this page)", "2;37", color))
            else:
                for ln in highlight(ctx.displayed, spans, color):
                    print(ln)
        else:
            if session.search(cmd) is None:
                print(_c("(no match)", "2;37", color))
            else:
                _print_lines(ctx.scroll(page), color)

def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose or os.environ.get("THESAURUS_VERBOSE") == "1":
        logging.basicConfig(level=logging.INFO)

    specs = list(args.dicts)
    for d in args.dirs:
        try:
            specs.extend(discover_archives(d))
        except FileNotFoundError:
            parser.error(f"--dir {d}: no such directory")
    if not specs:
        parser.error("give at least one --dict NAME=PATH or --dir DIR")
    if args.lines == 0:
        parser.error("--lines must not be 0")

    try:
        options = Options(
            normalize=not args.no_normalize, foldcase=args.foldcase, regexp=args.regexp,
            strict=args.strict, header=not args.no_header, width=args.width,
            entryload=args.entryload, lmargin=args.lmargin, rmargin=args.rmargin,
            raw=not args.color,
        )
    except ConfigError as exc:
        parser.error(str(exc))

    color = not options.raw and _supports_color()
    session = Session.open(specs, options)
    for name, exc in session.failures.items():
        print(f"[{name}] not loaded: {exc}", file=sys.stderr)
    if not session.ok:
        print("No dictionary could be loaded.", file=sys.stderr)
        return 1

    try:
        if args.query is not None:
            if session.search(args.query) is None:
                print("(no match)"); return 0
            _print_lines(session.current.scroll(abs(args.lines)), color)
            return 0
        repl(session, abs(args.lines), color)
        return 0
    finally:
        session.close()

if __name__ == "__main__":
    sys.exit(main())
