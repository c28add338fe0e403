from __future__ import annotations

import logging
import signal
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, ttk

from .config import TrueFloatsConfig
from .core import AnnotationRecord, format_hover_text, line_col
from .datatypes import bits_of
from .session import AnnotationSession, replace_literal
from .visualizer import UI_FONT, BitFieldPanel, HoverExplain

logger = logging.getLogger(__name__)

SOURCE_FONT = ("DejaVu Sans Mono", 12)
LITERAL_TAG = "literal"
SELECTED_TAG = "literal-selected"
UNTITLED_DOC = "untitled"


def annotation_label(record: AnnotationRecord) -> str:
    label = f"≈ {record.display}"
    if record.hex is not None:
        label += f" {record.hex}"
    return label


def record_at_offset(records: list[AnnotationRecord], offset: int) -> AnnotationRecord | None:
    for record in records:
        if record.start <= offset < record.end:
            return record
    return None


class TrueFloatsApp(tk.Tk):
    def __init__(self, config: TrueFloatsConfig | None = None, path: Path | None = None) -> None:
        super().__init__()
        self.title("True Floats")
        self.geometry("1200x820")
        self.minsize(900, 600)
        self.configure(bg="#f5f7fa")

        self.session = AnnotationSession(config or TrueFloatsConfig()).start()
        self.doc_id = str(path) if path is not None else UNTITLED_DOC
        self.records: list[AnnotationRecord] = []
        self._version = 0
        self._programmatic = False
        self._debounce_after_id: str | None = None
        self.status_var = tk.StringVar(value="Open a file or type to inspect float literals.")

        self._build_ui()
        self._wire_events()
        self._install_signal_handlers()

        if path is not None:
            self.load_file(path)
        else:
            self.refresh(forced=True)

    def _build_ui(self) -> None:
        root = tk.Frame(self, bg="#f5f7fa")
        root.pack(fill="both", expand=True, padx=12, pady=10)

        toolbar = tk.Frame(root, bg="#f5f7fa")
        toolbar.pack(fill="x", pady=(0, 8))
        for label, command in (
            ("Open…", self._on_open),
            ("Toggle", self.toggle_enabled),
            ("Toggle Hex", self.toggle_hex),
            ("Refresh", lambda: self.refresh(forced=True)),
            ("Replace with true value", self.replace_selected),
        ):
            tk.Button(
                toolbar,
                text=label,
                command=command,
                font=UI_FONT,
                padx=10,
                pady=4,
                bd=1,
                relief="solid",
                highlightthickness=0,
                cursor="hand2",
                takefocus=False,
            ).pack(side="left", padx=(0, 6))

        panes = tk.PanedWindow(root, orient="horizontal", bg="#f5f7fa", sashwidth=6)
        panes.pack(fill="both", expand=True)

        source_frame = tk.Frame(panes, bg="#ffffff")
        self.text = tk.Text(
            source_frame,
            font=SOURCE_FONT,
            undo=True,
            wrap="none",
            bd=1,
            relief="solid",
        )
        text_scroll = tk.Scrollbar(source_frame, orient="vertical", command=self.text.yview)
        self.text.configure(yscrollcommand=text_scroll.set)
        text_scroll.pack(side="right", fill="y")
        self.text.pack(side="left", fill="both", expand=True)
        self.text.tag_configure(LITERAL_TAG, background="#eef6ff", underline=True)
        self.text.tag_configure(SELECTED_TAG, background="#ffe9a8")
        panes.add(source_frame, stretch="always")

        side = tk.Frame(panes, bg="#f5f7fa")
        style = ttk.Style(self)
        delta = self.session.config.viewer.font_size_delta
        style.configure("Annotations.Treeview", font=("DejaVu Sans Mono", 11 + delta))
        self.table = ttk.Treeview(
            side,
            columns=("position", "literal", "annotation"),
            show="headings",
            selectmode="browse",
            style="Annotations.Treeview",
        )
        for column, heading, width in (
            ("position", "Line:Col", 80),
            ("literal", "Literal", 160),
            ("annotation", "True value", 320),
        ):
            self.table.heading(column, text=heading)
            self.table.column(column, width=width, anchor="w")
        self.table.pack(fill="both", expand=True)

        self.bit_panel = BitFieldPanel(side)
        self.bit_panel.pack(fill="x", pady=(8, 0))
        panes.add(side)

        tk.Label(
            root,
            textvariable=self.status_var,
            bg="#f5f7fa",
            fg="#3f5368",
            anchor="w",
            font=UI_FONT,
        ).pack(fill="x", pady=(8, 0))

        self._hover = HoverExplain(self.text, self._hover_text_under_pointer, tag=LITERAL_TAG)

    def _wire_events(self) -> None:
        self.text.bind("<<Modified>>", self._on_text_modified)
        self.table.bind("<<TreeviewSelect>>", self._on_table_select)
        self.bind_all("<Escape>", self._on_escape_quit, add=True)
        self.protocol("WM_DELETE_WINDOW", self._quit_app)

    def _install_signal_handlers(self) -> None:
        def _on_sigint(_signum: int, _frame: object) -> None:
            self.after(0, self._quit_app)

        signal.signal(signal.SIGINT, _on_sigint)

    def load_file(self, path: Path) -> None:
        try:
            contents = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Unable to open %s: %s", path, exc)
            self.status_var.set(f"Unable to open {path}: {exc}")
            return
        self.session.invalidate(self.doc_id)
        self.doc_id = str(path)
        self.title(f"True Floats - {path.name}")
        self._set_text(contents)
        self.refresh(forced=True)

    def _on_open(self) -> None:
        selected = filedialog.askopenfilename(parent=self)
        if selected:
            self.load_file(Path(selected))

    def _set_text(self, contents: str) -> None:
        self._programmatic = True
        try:
            self.text.delete("1.0", tk.END)
            self.text.insert("1.0", contents)
            self.text.edit_modified(False)
        finally:
            self._programmatic = False
        self._version += 1

    def current_text(self) -> str:
        return self.text.get("1.0", "end-1c")

    def _index(self, offset: int) -> str:
        return f"1.0 + {offset} chars"

    def _on_text_modified(self, _event: tk.Event) -> None:
        if not self.text.edit_modified():
            return
        self.text.edit_modified(False)
        if self._programmatic:
            return
        self._version += 1
        self._schedule_update()

    def _schedule_update(self) -> None:
        if self._debounce_after_id is not None:
            self.after_cancel(self._debounce_after_id)
        self._debounce_after_id = self.after(
            self.session.config.viewer.debounce_ms, self.refresh
        )
        self.status_var.set("Updating annotations...")

    def refresh(self, forced: bool = False) -> None:
        self._debounce_after_id = None
        text = self.current_text()
        self.records = self.session.annotate(self.doc_id, self._version, text, forced=forced)
        self._render_records(text)
        if not self.session.enabled:
            self.status_var.set("True Floats disabled.")
        else:
            self.status_var.set(f"{len(self.records)} literal(s) annotated.")

    def _render_records(self, text: str) -> None:
        self.text.tag_remove(LITERAL_TAG, "1.0", tk.END)
        self.text.tag_remove(SELECTED_TAG, "1.0", tk.END)
        self.table.delete(*self.table.get_children())
        self.bit_panel.clear()
        for idx, record in enumerate(self.records):
            self.text.tag_add(LITERAL_TAG, self._index(record.start), self._index(record.end))
            line, column = line_col(text, record.start)
            self.table.insert(
                "",
                tk.END,
                iid=str(idx),
                values=(f"{line + 1}:{column + 1}", record.literal, annotation_label(record)),
            )

    def _selected_record(self) -> AnnotationRecord | None:
        selection = self.table.selection()
        if not selection:
            return None
        idx = int(selection[0])
        if idx >= len(self.records):
            return None
        return self.records[idx]

    def _on_table_select(self, _event: tk.Event) -> None:
        record = self._selected_record()
        self.text.tag_remove(SELECTED_TAG, "1.0", tk.END)
        if record is None:
            self.bit_panel.clear()
            return
        start = self._index(record.start)
        self.text.tag_add(SELECTED_TAG, start, self._index(record.end))
        self.text.see(start)
        self.bit_panel.apply_bits(bits_of(record.value))

    def _hover_text_under_pointer(self) -> str:
        x = self.text.winfo_pointerx() - self.text.winfo_rootx()
        y = self.text.winfo_pointery() - self.text.winfo_rooty()
        offset = len(self.text.get("1.0", f"@{x},{y}"))
        record = record_at_offset(self.records, offset)
        if record is None:
            return ""
        return format_hover_text(record)

    def toggle_enabled(self) -> None:
        enabled = self.session.toggle()
        self.refresh(forced=True)
        self.status_var.set(f"True Floats {'enabled' if enabled else 'disabled'}")

    def toggle_hex(self) -> None:
        shown = self.session.toggle_hex()
        self.refresh(forced=True)
        self.status_var.set(f"True Floats hex display {'enabled' if shown else 'disabled'}")

    def replace_selected(self) -> None:
        record = self._selected_record()
        if record is None:
            self.status_var.set("Select a literal to replace.")
            return
        text = self.current_text()
        updated = replace_literal(text, record.start, record.end, record.full)
        if updated is None:
            self.status_var.set("True Floats: Literal changed; skipped.")
            return
        inserted = updated[record.start : len(updated) - (len(text) - record.end)]
        self.text.delete(self._index(record.start), self._index(record.end))
        self.text.insert(self._index(record.start), inserted)
        self.status_var.set(f"Replaced {record.literal} with {inserted}.")

    def _on_escape_quit(self, _event: tk.Event) -> str:
        self._quit_app()
        return "break"

    def _quit_app(self) -> None:
        if self._debounce_after_id is not None:
            try:
                self.after_cancel(self._debounce_after_id)
            except tk.TclError:
                pass
            self._debounce_after_id = None
        self._hover.hide()
        self.session.dispose()
        self.quit()
        self.destroy()


def main(config: TrueFloatsConfig | None = None, path: Path | None = None) -> None:
    app = TrueFloatsApp(config=config, path=path)
    app.mainloop()
