# app.py
# CustomTkinter GUI for the thesaurus engine (dark theme).
# - Open every dictionary archive found in a folder.
# - Background loading thread (keeps UI responsive); dictionaries load fork-join.
# - Look up a word, page through entries; results & event log panes.

from __future__ import annotations
import threading
from typing import List, Optional

import tkinter.filedialog as fd
import tkinter.messagebox as mb
import customtkinter as ctk

from thesaurus.config import Options
from thesaurus.engine import Session
from thesaurus.loader import discover_archives
from thesaurus.normalize import strip_markup

PAGE_LINES = 24


# -------------------- small helpers --------------------

def shorten_path(p: str, max_chars: int = 60) -> str:
    """Shorten long paths neatly for labels."""
    if len(p) <= max_chars:
        return p
    keep = max_chars // 2 - 3
    return p[:keep] + "..." + p[-keep:]


# -------------------- main app --------------------

class ThesaurusApp(ctk.CTk):
    """Dark-themed GUI that opens a folder of dictionaries and pages through entries."""

    def __init__(self) -> None:
        super().__init__()

        # Theme
        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("blue")

        # Window
        self.title("Thesaurus")
        self.geometry("900x650")
        self.minsize(820, 560)

        # State
        self._session: Optional[Session] = None
        self._loading_thread: Optional[threading.Thread] = None

        # Fonts
        self.font_title = ctk.CTkFont(size=18, weight="bold")
        self.font_label = ctk.CTkFont(size=13)
        self.font_mono = ctk.CTkFont(family="Cascadia Mono, Menlo, Consolas, Courier New", size=13)

        # Layout grid
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)  # results
        self.grid_rowconfigure(4, weight=0)  # log

        self._build_source_bar()
        self._build_search()
        self._build_nav()
        self._build_results()
        self._build_log()

        self._set_status("Ready")
        self.protocol("WM_DELETE_WINDOW", self._on_close)

    # --------- UI sections ---------

    def _build_source_bar(self) -> None:
        bar = ctk.CTkFrame(self, corner_radius=10)
        bar.grid(row=0, column=0, sticky="ew", padx=12, pady=(12, 6))
        bar.grid_columnconfigure(1, weight=1)

        ctk.CTkButton(bar, text="Choose Folder", command=self._choose_folder).grid(
            row=0, column=0, padx=(12, 6), pady=10
        )
        self.lbl_source = ctk.CTkLabel(bar, text="No folder selected", anchor="w", font=self.font_label)
        self.lbl_source.grid(row=0, column=1, sticky="ew", padx=6, pady=10)

        self.progress = ctk.CTkProgressBar(bar, mode="indeterminate", determinate_speed=1.2)
        self.progress.grid(row=0, column=2, sticky="e", padx=(0, 6), pady=10)

        self.lbl_status = ctk.CTkLabel(bar, text="Status: —", anchor="e")
        self.lbl_status.grid(row=0, column=3, sticky="e", padx=12, pady=10)

    def _build_search(self) -> None:
        box = ctk.CTkFrame(self, corner_radius=10)
        box.grid(row=1, column=0, sticky="ew", padx=12, pady=6)
        box.grid_columnconfigure(1, weight=1)

        self.opt_dict = ctk.CTkOptionMenu(box, values=["—"], command=self._on_dict_selected)
        self.opt_dict.grid(row=0, column=0, padx=(12, 6), pady=10)

        self.entry_query = ctk.CTkEntry(box, placeholder_text="Look up a word and press Enter…")
        self.entry_query.grid(row=0, column=1, sticky="ew", padx=6, pady=10)
        self.entry_query.bind("<Return>", self._do_search)

        self.chk_strict = ctk.CTkCheckBox(box, text="Strict", command=self._on_strict)
        self.chk_strict.grid(row=0, column=2, padx=6, pady=10)
        self.chk_regexp = ctk.CTkCheckBox(box, text="Regex", command=self._on_regexp)
        self.chk_regexp.grid(row=0, column=3, padx=(6, 12), pady=10)

    def _build_nav(self) -> None:
        nav = ctk.CTkFrame(self, corner_radius=10)
        nav.grid(row=2, column=0, sticky="ew", padx=12, pady=6)
        buttons = [
            ("◀ Entry", lambda: self._show(self._ctx_call("jump_entries", -1, PAGE_LINES))),
            ("▲ Page", lambda: self._show(self._ctx_call("scroll", -PAGE_LINES))),
            ("▼ Page", lambda: self._show(self._ctx_call("scroll", PAGE_LINES))),
            ("Entry ▶", lambda: self._show(self._ctx_call("jump_entries", 1, PAGE_LINES))),
        ]
        for col, (label, cmd) in enumerate(buttons):
            ctk.CTkButton(nav, text=label, width=90, command=cmd).grid(row=0, column=col, padx=6, pady=8)

    def _build_results(self) -> None:
        frame = ctk.CTkFrame(self, corner_radius=10)
        frame.grid(row=3, column=0, sticky="nsew", padx=12, pady=6)
        frame.grid_columnconfigure(0, weight=1)
        frame.grid_rowconfigure(0, weight=1)

        self.txt_results = ctk.CTkTextbox(frame, wrap="none", font=self.font_mono)
        self.txt_results.grid(row=0, column=0, sticky="nsew", padx=12, pady=12)
        self._set_results("(choose a folder with dictionaries, then look up a word)")

    def _build_log(self) -> None:
        frame = ctk.CTkFrame(self, corner_radius=10)
        frame.grid(row=4, column=0, sticky="nsew", padx=12, pady=(6, 12))
        frame.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(frame, text="Event log", font=self.font_label).grid(
            row=0, column=0, sticky="w", padx=12, pady=(10, 2)
        )
        self.txt_log = ctk.CTkTextbox(frame, height=90, wrap="word", font=ctk.CTkFont(size=12))
        self.txt_log.grid(row=1, column=0, sticky="nsew", padx=12, pady=(0, 12))
        self._log("GUI ready. Choose a folder to begin.")

    # --------- loading pipeline (threaded) ---------

    def _choose_folder(self) -> None:
        path = fd.askdirectory(title="Choose dictionary folder")
        if not path:
            return
        if self._loading_thread and self._loading_thread.is_alive():
            mb.showinfo("Loading", "Dictionaries are already loading. Please wait.")
            return

        self.lbl_source.configure(text=f"Folder: {shorten_path(path)}")
        self._set_status("Loading…")
        self.progress.start()
        self._loading_thread = threading.Thread(target=self._load_worker, args=(path,), daemon=True)
        self._loading_thread.start()

    def _load_worker(self, path: str) -> None:
        try:
            specs = discover_archives(path)
            session = Session.open(specs, Options(width=90))
        except (OSError, ValueError) as exc:
            self.after(0, lambda err=exc: self._on_load_error(err))
            return
        self.after(0, lambda: self._on_load_ok(session))

    def _on_load_ok(self, session: Session) -> None:
        self.progress.stop()
        if self._session is not None:
            self._session.close()
        self._session = session
        for name, exc in session.failures.items():
            self._log(f"Not loaded: {name}: {exc}")
        names = session.names()
        if not names:
            self._set_status("No dictionary found.")
            self.opt_dict.configure(values=["—"])
            return
        self.opt_dict.configure(values=names)
        self.opt_dict.set(names[0])
        self._set_status(f"Loaded {len(names)} dictionaries.")
        self._log(f"Dictionaries ready: {', '.join(names)}")
        self.entry_query.focus_set()

    def _on_load_error(self, exc: Exception) -> None:
        self.progress.stop()
        self._set_status("Error while loading.")
        self._log(f"ERROR: {exc!r}")
        mb.showerror("Load error", "Failed to open the folder.\nSee event log for details.")

    # --------- search & navigation ---------

    def _on_dict_selected(self, name: str) -> None:
        if self._session and name in self._session.contexts:
            self._session.select(name)
            self._log(f"Selected {name}")

    def _do_search(self, _ev=None) -> None:
        q = self.entry_query.get().strip()
        if not q or self._session is None or not self._session.ok:
            return
        if self._session.search(q) is None:
            self._set_results("(no match)")
            return
        self._show(self._session.current.scroll(PAGE_LINES))

    def _on_strict(self) -> None:
        self._toggle("set_strict", bool(self.chk_strict.get()))

    def _on_regexp(self) -> None:
        self._toggle("set_regexp", bool(self.chk_regexp.get()))

    def _toggle(self, method: str, flag: bool) -> None:
        if self._session is None or not self._session.ok:
            return
        ctx = self._session.current
        getattr(ctx, method)(flag)
        if ctx.query:
            self._show(ctx.scroll(PAGE_LINES))

    def _ctx_call(self, method: str, *args) -> Optional[List[str]]:
        if self._session is None or not self._session.ok:
            return None
        return getattr(self._session.current, method)(*args)

    def _show(self, lines: Optional[List[str]]) -> None:
        if lines is None:
            self._log("Nothing more to show.")
            return
        self._set_results("\n".join(strip_markup(ln) for ln in lines))

    # --------- misc UI helpers ---------

    def _set_status(self, text: str) -> None:
        self.lbl_status.configure(text=f"Status: {text}")

    def _set_results(self, text: str) -> None:
        self.txt_results.configure(state="normal")
        self.txt_results.delete("0.0", "end")
        if text:
            self.txt_results.insert("end", text)
        self.txt_results.configure(state="disabled")

    def _log(self, msg: str) -> None:
        self.txt_log.insert("end", msg + "\n")
        self.txt_log.see("end")

    # --------- lifecycle ---------

    def _on_close(self) -> None:
        if self._session is not None:
            self._session.close()
        self.destroy()


if __name__ == "__main__":
    app = ThesaurusApp()
    app.mainloop()
