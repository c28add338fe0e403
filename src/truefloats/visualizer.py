from __future__ import annotations

import tkinter as tk
import tkinter.font as tkfont
from decimal import Decimal
from typing import Callable

from .datatypes import DOUBLE, FloatBits, format_reverse_calc

UI_FONT = ("DejaVu Sans", 11)
UI_FONT_BOLD = ("DejaVu Sans", 11, "bold")
PANEL_TITLE_FONT = ("DejaVu Sans", 12, "bold")
VALUE_FONT = ("DejaVu Sans Mono", 11)
BIT_FIELD_FONT = ("DejaVu Sans Mono", 13, "bold")
BIT_INDEX_FONT = ("DejaVu Sans Mono", 8, "bold")
TOOLTIP_FONT = ("DejaVu Sans", 11)
BIT_INDEX_ROW_HEIGHT = 14


def _format_factor_decimal(value: Decimal) -> str:
    if value == 0:
        return "0"
    return format(value, ".17g")


def field_factor_text(bits: FloatBits) -> tuple[str, str, str]:
    """Human-readable meaning of the sign, exponent and fraction fields."""
    sign = int(bits.sign, 2)
    exponent_raw = int(bits.exponent, 2)
    mantissa_raw = int(bits.fraction, 2)
    bias = DOUBLE.bias
    mantissa_term = Decimal(mantissa_raw) / (Decimal(2) ** DOUBLE.mantissa_bits)

    sign_text = f"(-1)^{sign} = {'-1' if sign == 1 else '1'}"
    classification = bits.classification

    if classification == "normal":
        return (
            sign_text,
            f"2^({exponent_raw}-{bias}) = 2^{exponent_raw - bias}",
            f"1 + {mantissa_raw}/2^{DOUBLE.mantissa_bits} = "
            f"{_format_factor_decimal(Decimal(1) + mantissa_term)}",
        )
    if classification == "subnormal":
        return (
            sign_text,
            f"2^(1-{bias}) = 2^{1 - bias}",
            f"{mantissa_raw}/2^{DOUBLE.mantissa_bits} = "
            f"{_format_factor_decimal(mantissa_term)}",
        )
    if classification in {"+0", "-0"}:
        return sign_text, "zero case", "0"
    if classification in {"+inf", "-inf"}:
        return sign_text, f"{exponent_raw} (all 1s)", "0 -> infinity"
    return (
        sign_text,
        f"{exponent_raw} (all 1s)",
        f"{mantissa_raw}/2^{DOUBLE.mantissa_bits} (non-zero) -> NaN",
    )


def bit_index_tokens(bit_count: int, width: int = 2) -> list[str]:
    if bit_count <= 0:
        return []
    token_width = max(1, width)
    return [f"{idx:>{token_width}d}" for idx in range(bit_count - 1, -1, -1)]


class HoverExplain:
    """Tooltip shown while the pointer is over a widget or a text tag."""

    def __init__(
        self,
        widget: tk.Widget,
        text_provider: str | Callable[[], str],
        *,
        tag: str | None = None,
    ) -> None:
        self.widget = widget
        self.text_provider = text_provider
        self._tooltip: tk.Toplevel | None = None

        if tag is not None and isinstance(widget, tk.Text):
            widget.tag_bind(tag, "<Enter>", self._on_enter, add=True)
            widget.tag_bind(tag, "<Leave>", self._on_leave, add=True)
            widget.tag_bind(tag, "<Motion>", self._on_motion, add=True)
        else:
            widget.bind("<Enter>", self._on_enter, add=True)
            widget.bind("<Leave>", self._on_leave, add=True)
            widget.bind("<Motion>", self._on_motion, add=True)

    def _resolve_text(self) -> str:
        if callable(self.text_provider):
            return self.text_provider()
        return self.text_provider

    def _on_enter(self, event: tk.Event) -> None:
        text = self._resolve_text()
        if not text or self._tooltip is not None:
            return
        self._tooltip = tk.Toplevel(self.widget)
        self._tooltip.overrideredirect(True)
        self._tooltip.attributes("-topmost", True)
        label = tk.Label(
            self._tooltip,
            text=text,
            bg="#fffdeb",
            fg="#1f2d3d",
            justify="left",
            padx=8,
            pady=6,
            relief="solid",
            bd=1,
            font=TOOLTIP_FONT,
        )
        label.pack()
        self._move_tooltip(event)

    def _on_leave(self, _event: tk.Event) -> None:
        self.hide()

    def _on_motion(self, event: tk.Event) -> None:
        self._move_tooltip(event)

    def _move_tooltip(self, event: tk.Event) -> None:
        if self._tooltip is None:
            return
        self._tooltip.geometry(f"+{event.x_root + 16}+{event.y_root + 16}")

    def hide(self) -> None:
        if self._tooltip is not None:
            self._tooltip.destroy()
            self._tooltip = None


def _make_copyable_entry(
    parent: tk.Widget,
    variable: tk.StringVar,
    bg: str,
    width: int = 1,
) -> tk.Entry:
    entry = tk.Entry(
        parent,
        textvariable=variable,
        relief="flat",
        bd=0,
        highlightthickness=0,
        font=VALUE_FONT,
        fg="#1f2d3d",
        bg=bg,
        readonlybackground=bg,
        width=width,
    )
    entry.configure(state="readonly")
    return entry


class BitFieldPanel(tk.LabelFrame):
    """Read-only IEEE-754 binary64 breakdown of the selected literal."""

    def __init__(self, parent: tk.Widget) -> None:
        super().__init__(
            parent,
            text=f"{DOUBLE.name.title()} ({DOUBLE.bits}-bit)",
            font=PANEL_TITLE_FONT,
            bg="#ffffff",
            fg="#22313f",
            bd=1,
            relief="solid",
            padx=10,
            pady=8,
        )
        self.hex_var = tk.StringVar()
        self.classification_var = tk.StringVar()
        self.reverse_calc_var = tk.StringVar()
        self.sign_bits_var = tk.StringVar(value="0")
        self.exponent_bits_var = tk.StringVar(value="0" * DOUBLE.exponent_bits)
        self.fraction_bits_var = tk.StringVar(value="0" * DOUBLE.mantissa_bits)
        self.sign_factor_var = tk.StringVar()
        self.exponent_factor_var = tk.StringVar()
        self.fraction_factor_var = tk.StringVar()

        self._build_ui()

    def _build_ui(self) -> None:
        summary = tk.Frame(self, bg="#ffffff")
        summary.pack(fill="x")
        self._build_value_row(summary, "Hex:", self.hex_var)
        self._build_value_row(summary, "Class:", self.classification_var)
        self._build_value_row(summary, "Value:", self.reverse_calc_var)

        fields = tk.Frame(self, bg="#ffffff")
        fields.pack(fill="x", pady=(8, 0))
        self._build_bit_row(fields, "Sign:", self.sign_bits_var, 1, self.sign_factor_var)
        self._build_bit_row(
            fields,
            "Exponent:",
            self.exponent_bits_var,
            DOUBLE.exponent_bits,
            self.exponent_factor_var,
        )
        self._build_bit_row(
            fields,
            "Fraction:",
            self.fraction_bits_var,
            DOUBLE.mantissa_bits,
            self.fraction_factor_var,
        )

    def _build_value_row(self, parent: tk.Widget, label: str, variable: tk.StringVar) -> None:
        row = tk.Frame(parent, bg="#ffffff")
        row.pack(fill="x", pady=1)
        tk.Label(
            row,
            text=label,
            width=10,
            anchor="w",
            bg="#ffffff",
            fg="#34495e",
            font=UI_FONT_BOLD,
        ).pack(side="left")
        _make_copyable_entry(row, variable, bg="#ffffff").pack(
            side="left", fill="x", expand=True, padx=(2, 0)
        )

    def _build_bit_row(
        self,
        parent: tk.Widget,
        label: str,
        variable: tk.StringVar,
        bit_count: int,
        factor_var: tk.StringVar,
    ) -> None:
        row = tk.Frame(parent, bg="#ffffff")
        row.pack(fill="x", pady=1)
        tk.Label(
            row,
            text=label,
            width=10,
            anchor="nw",
            bg="#ffffff",
            fg="#34495e",
            font=UI_FONT_BOLD,
        ).pack(side="left", anchor="n")

        column = tk.Frame(row, bg="#ffffff")
        column.pack(side="left", fill="x", expand=True)
        guide = tk.Canvas(
            column,
            bg="#ffffff",
            bd=0,
            highlightthickness=0,
            height=BIT_INDEX_ROW_HEIGHT,
        )
        guide.pack(side="top", fill="x", anchor="w")
        entry = tk.Entry(
            column,
            textvariable=variable,
            width=bit_count,
            font=BIT_FIELD_FONT,
            relief="solid",
            bd=1,
            state="readonly",
        )
        entry.pack(side="top", anchor="w")
        _make_copyable_entry(column, factor_var, bg="#ffffff", width=48).pack(
            side="top", anchor="w"
        )
        self._bind_bit_index_guide(entry, guide, bit_count)

    @staticmethod
    def _bind_bit_index_guide(entry: tk.Entry, canvas: tk.Canvas, bit_count: int) -> None:
        tokens = bit_index_tokens(bit_count, width=2)
        bit_font = tkfont.Font(font=BIT_FIELD_FONT)
        min_width = max(1, bit_font.measure("0") * bit_count)

        def _render(_event: tk.Event | None = None) -> None:
            width = max(entry.winfo_width(), min_width)
            cell_width = width / bit_count
            canvas.configure(width=width)
            canvas.delete("all")
            for col, token in enumerate(tokens):
                canvas.create_text(
                    (col + 0.5) * cell_width,
                    BIT_INDEX_ROW_HEIGHT / 2,
                    text=token,
                    fill="#c0392b",
                    font=BIT_INDEX_FONT,
                )

        entry.bind("<Configure>", _render, add=True)
        entry.after_idle(_render)

    def clear(self) -> None:
        for var in (
            self.hex_var,
            self.classification_var,
            self.reverse_calc_var,
            self.sign_factor_var,
            self.exponent_factor_var,
            self.fraction_factor_var,
        ):
            var.set("")

    def apply_bits(self, bits: FloatBits) -> None:
        self.hex_var.set(bits.hex)
        self.classification_var.set(bits.classification)
        self.reverse_calc_var.set(format_reverse_calc(bits))
        self.sign_bits_var.set(bits.sign)
        self.exponent_bits_var.set(bits.exponent)
        self.fraction_bits_var.set(bits.fraction)
        sign_text, exponent_text, fraction_text = field_factor_text(bits)
        self.sign_factor_var.set(sign_text)
        self.exponent_factor_var.set(exponent_text)
        self.fraction_factor_var.set(fraction_text)
