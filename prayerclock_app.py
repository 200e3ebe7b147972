#!/usr/bin/env python3
"""
Prayer Clock Desktop Widget
Islamic pixel-art themed window showing:
  - City search with live suggestions, or detect location
  - Hijri date and the live clock of the chosen city
  - Daily prayer times with the current prayer highlighted
  - Countdown to the next prayer and the start of the last third of the night
"""

import logging
import sys
import tkinter as tk

from prayerclock import config
from prayerclock.clock import format_time_12h
from prayerclock.models import PRAYER_NAMES
from prayerclock.session import Session, SessionView

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
# Theme constants: pixel-art Islamic palette
# ──────────────────────────────────────────────────────────────────────────────
THEMES = {
    "dark": {
        "bg": "#0d1117",          # near-black background
        "card": "#161b22",        # slightly lighter card
        "highlight": "#1a3a2a",   # deep Islamic green for the active row
        "border": "#2ea043",
        "gold": "#f0c040",
        "green": "#3fb950",
        "text": "#e6edf3",
        "dim": "#8b949e",
        "red": "#ff6b6b",
    },
    "light": {
        "bg": "#f6f1e4",
        "card": "#ffffff",
        "highlight": "#d7efd9",
        "border": "#2ea043",
        "gold": "#a77b00",
        "green": "#1a7f37",
        "text": "#1f2328",
        "dim": "#656d76",
        "red": "#cf222e",
    },
}

FONT_PIXEL = ("Courier", 10, "bold")
FONT_PIXEL_SM = ("Courier", 8)
FONT_PIXEL_LG = ("Courier", 14, "bold")
FONT_CLOCK = ("Courier", 22, "bold")
FONT_ARABIC = ("Arial", 16, "bold")

WINDOW_W = 480
WINDOW_H = 680

PIXEL_BORDER_H = "▀" * 52
PIXEL_BORDER_B = "▄" * 52
PRAYER_ICONS = {"Fajr": "🌙", "Dhuhr": "☀️", "Asr": "☀️", "Maghrib": "🌇", "Isha": "🌌"}


def setup_logging(level: str = config.LOG_LEVEL) -> None:
    """Send log records to stdout with file and line numbers."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
        ))
        root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))


# ──────────────────────────────────────────────────────────────────────────────
# Main App
# ──────────────────────────────────────────────────────────────────────────────
class PrayerClockApp(SessionView):
    def __init__(self, root: tk.Tk, session: Session = None):
        self.root = root
        self._themed: list = []   # (widget, fg role, bg role)
        self.prayer_rows: dict = {}
        self._active_name = None

        self.session = session or Session(root, self)
        self._setup_window()
        self._build_ui()
        self._apply_theme()

        city = self.session.start()
        if city:
            self.city_var.set(city)

    @property
    def theme(self) -> dict:
        return THEMES["dark" if self.session.state.dark_mode else "light"]

    # ──────────────────────────────────────────────────────────────────────
    # Window setup
    # ──────────────────────────────────────────────────────────────────────
    def _setup_window(self):
        root = self.root
        root.title("Prayer Clock")
        root.resizable(False, False)
        screen_w = root.winfo_screenwidth()
        screen_h = root.winfo_screenheight()
        x = screen_w - WINDOW_W - 40
        y = (screen_h - WINDOW_H) // 2
        root.geometry(f"{WINDOW_W}x{WINDOW_H}+{x}+{y}")
        root.protocol("WM_DELETE_WINDOW", self._on_close)

    def _on_close(self):
        self.session.stop()
        self.root.destroy()

    def _themed_widget(self, widget, fg="text", bg="bg"):
        self._themed.append((widget, fg, bg))
        return widget

    def _label(self, parent, text="", font=FONT_PIXEL, fg="text", bg="bg", **kwargs):
        return self._themed_widget(tk.Label(parent, text=text, font=font, **kwargs), fg, bg)

    def _button(self, parent, text, command, fg="green", bg="bg"):
        btn = tk.Button(parent, text=text, font=FONT_PIXEL_SM, bd=0, cursor="hand2", command=command)
        return self._themed_widget(btn, fg, bg)

    # ──────────────────────────────────────────────────────────────────────
    # UI construction
    # ──────────────────────────────────────────────────────────────────────
    def _build_ui(self):
        root = self.root
        self._frame = self._themed_widget(tk.Frame(root, bd=0), None, "bg")
        self._frame.pack(fill=tk.BOTH, expand=True)
        frame = self._frame

        # ── title bar ────────────────────────────────────────────────────
        title_bar = self._themed_widget(tk.Frame(frame, height=32), None, "card")
        title_bar.pack(fill=tk.X, side=tk.TOP)
        self._label(
            title_bar, text="  🕌  PRAYER CLOCK  ◆  مواقيت الصلاة  ", fg="gold", bg="card",
        ).pack(side=tk.LEFT, padx=6)
        self.btn_theme = self._button(title_bar, "☀️", self._toggle_theme, fg="gold", bg="card")
        self.btn_theme.pack(side=tk.RIGHT, padx=4, pady=4)

        self._label(frame, text=PIXEL_BORDER_H, font=("Courier", 6), fg="border").pack(fill=tk.X)

        # ── search row ───────────────────────────────────────────────────
        search = self._themed_widget(tk.Frame(frame), None, "bg")
        search.pack(fill=tk.X, padx=10, pady=(6, 0))

        self.city_var = tk.StringVar()
        self.entry_city = self._themed_widget(
            tk.Entry(search, textvariable=self.city_var, font=FONT_PIXEL, relief=tk.FLAT, width=26),
            "text", "card",
        )
        self.entry_city.pack(side=tk.LEFT, fill=tk.X, expand=True, ipady=3)
        self.entry_city.bind("<KeyRelease>", self._on_key)
        self.entry_city.bind("<Return>", lambda _e: self.session.submit(self.city_var.get()))

        self._button(search, " 🔍 ", lambda: self.session.search(self.city_var.get())).pack(side=tk.LEFT, padx=2)
        self._button(search, " 📍 ", self.session.resolve_current_location).pack(side=tk.LEFT, padx=2)

        # ── suggestions (packed only while there is something to show) ──
        self.suggest_box = self._themed_widget(
            tk.Listbox(frame, font=FONT_PIXEL_SM, height=6, activestyle="none", relief=tk.FLAT),
            "text", "card",
        )
        self.suggest_box.bind("<<ListboxSelect>>", self._on_suggestion_click)
        self.lbl_suggest_status = self._label(frame, font=FONT_PIXEL_SM, fg="dim")
        self._suggest_anchor = self._themed_widget(tk.Frame(frame, height=1), None, "bg")
        self._suggest_anchor.pack(fill=tk.X)

        # ── calculation method ───────────────────────────────────────────
        method_row = self._themed_widget(tk.Frame(frame), None, "bg")
        method_row.pack(fill=tk.X, padx=10, pady=4)
        self._label(method_row, text="Method:", font=FONT_PIXEL_SM, fg="dim").pack(side=tk.LEFT)
        self._method_labels = {label: mid for mid, label in config.CALCULATION_METHODS.items()}
        self.method_var = tk.StringVar(
            value=config.CALCULATION_METHODS.get(self.session.state.calc_method, "")
        )
        menu = tk.OptionMenu(method_row, self.method_var, *self._method_labels, command=self._on_method)
        menu.config(font=FONT_PIXEL_SM, bd=0, highlightthickness=0)
        self._themed_widget(menu, "text", "card").pack(side=tk.LEFT, fill=tk.X, expand=True, padx=4)

        # ── status lines ─────────────────────────────────────────────────
        self.lbl_loading = self._label(frame, text="⏳ Loading…", fg="dim")
        self.lbl_error = self._label(frame, fg="red", wraplength=440)

        # ── prayer panel (hidden until a full schedule arrives) ─────────
        self.panel = self._themed_widget(tk.Frame(frame), None, "bg")

        self._label(
            self.panel, text="بِسْمِ اللَّهِ الرَّحْمٰنِ الرَّحِيْمِ", font=FONT_ARABIC, fg="gold", pady=4,
        ).pack(fill=tk.X)

        self.lbl_location = self._label(self.panel, font=FONT_PIXEL_LG, fg="green", cursor="hand2")
        self.lbl_location.pack()
        self.lbl_location.bind("<Button-1>", self._on_location_click)
        self.lbl_hijri = self._label(self.panel, fg="gold")
        self.lbl_hijri.pack()

        self.prayer_frame = self._themed_widget(tk.Frame(self.panel), None, "bg")
        self.prayer_frame.pack(fill=tk.X, padx=10, pady=4)
        self._build_prayer_rows()

        self._label(self.panel, text="◇ ─────────────────────────── ◇", font=("Courier", 9), fg="border").pack(pady=2)
        self._label(self.panel, text="NEXT PRAYER", fg="dim").pack()
        self.lbl_next_name = self._label(self.panel, text="—", font=FONT_PIXEL_LG, fg="green")
        self.lbl_next_name.pack()
        self.lbl_countdown = self._label(self.panel, text="--", font=FONT_CLOCK, fg="gold")
        self.lbl_countdown.pack()
        self.lbl_last_third = self._label(self.panel, fg="dim")
        self.lbl_last_third.pack(pady=(4, 0))

        # ── live clock, always running ──────────────────────────────────
        self.lbl_clock = self._label(frame, text="00:00:00", font=FONT_CLOCK, fg="gold", pady=4)
        self.lbl_clock.pack(side=tk.BOTTOM)
        self._label(frame, text=PIXEL_BORDER_B, font=("Courier", 6), fg="border").pack(fill=tk.X, side=tk.BOTTOM)

    def _build_prayer_rows(self):
        """Create one row in the prayer grid for each prayer."""
        for name in PRAYER_NAMES:
            row = self._themed_widget(tk.Frame(self.prayer_frame, pady=2), None, "card")
            row.pack(fill=tk.X, pady=1)
            lbl_name = self._label(
                row, text=f" {PRAYER_ICONS[name]}  {name}", bg="card", anchor="w", width=22,
            )
            lbl_name.pack(side=tk.LEFT, padx=4)
            lbl_time = self._label(row, text="--:--", font=FONT_PIXEL_LG, bg="card", anchor="e", width=10)
            lbl_time.pack(side=tk.RIGHT, padx=4)
            self.prayer_rows[name] = {"row": row, "lbl_name": lbl_name, "lbl_time": lbl_time}

    # ──────────────────────────────────────────────────────────────────────
    # Theme
    # ──────────────────────────────────────────────────────────────────────
    def _apply_theme(self):
        theme = self.theme
        self.root.configure(bg=theme["bg"])
        for widget, fg, bg in self._themed:
            opts = {"bg": theme[bg]}
            if fg:
                opts["fg"] = theme[fg]
            widget.config(**opts)
        self.entry_city.config(insertbackground=theme["text"])
        self.btn_theme.config(text="☀️" if self.session.state.dark_mode else "🌙")
        self._highlight_active(self._active_name)

    def _toggle_theme(self):
        self.session.toggle_dark_mode()
        self._apply_theme()

    # ──────────────────────────────────────────────────────────────────────
    # Input handlers
    # ──────────────────────────────────────────────────────────────────────
    def _on_key(self, event):
        if event.keysym == "Return":
            return
        self.session.on_input(self.city_var.get())

    def _on_suggestion_click(self, _event):
        picked = self.suggest_box.curselection()
        if not picked:
            return
        candidate = self.session.state.suggestions[picked[0]]
        self.city_var.set(candidate.name)
        self.session.select_candidate(candidate)

    def _on_method(self, label):
        self.session.change_method(self._method_labels[label], self.city_var.get())

    def _on_location_click(self, _event):
        self.city_var.set(self.lbl_location.cget("text"))
        self.entry_city.focus_set()
        self.panel.pack_forget()
        self.clear_suggestions()

    # ──────────────────────────────────────────────────────────────────────
    # SessionView
    # ──────────────────────────────────────────────────────────────────────
    def show_loading(self):
        self.lbl_error.pack_forget()
        self.panel.pack_forget()
        self.lbl_loading.pack(before=self.lbl_clock, pady=10)

    def show_error(self, message: str):
        self.lbl_loading.pack_forget()
        self.lbl_error.config(text=f"⚠ {message}")
        self.lbl_error.pack(before=self.lbl_clock, pady=6)

    def show_schedule(self, schedule):
        self.lbl_loading.pack_forget()
        self.lbl_error.pack_forget()
        self.lbl_location.config(text=schedule.display_name)
        self.lbl_hijri.config(text=f"☪  {schedule.hijri}" if schedule.hijri else "")
        for name, time_str in schedule.prayers:
            self.prayer_rows[name]["lbl_time"].config(text=format_time_12h(time_str))
        self.panel.pack(before=self.lbl_clock, fill=tk.X)

    def show_clock_state(self, state):
        self.lbl_next_name.config(text=state.next_prayer_name)
        color = "red" if state.seconds_until_next < 300 else "gold"
        self.lbl_countdown.config(text=state.countdown, fg=self.theme[color])
        self.lbl_last_third.config(
            text=f"🌌 Last third of night: {format_time_12h(state.last_third_of_night)}"
        )
        if state.active_prayer_name != self._active_name:
            self._highlight_active(state.active_prayer_name)

    def _highlight_active(self, active_name):
        self._active_name = active_name
        theme = self.theme
        for name, widgets in self.prayer_rows.items():
            bg = theme["highlight"] if name == active_name else theme["card"]
            fg = theme["green"] if name == active_name else theme["text"]
            widgets["row"].config(bg=bg)
            widgets["lbl_name"].config(bg=bg, fg=fg)
            widgets["lbl_time"].config(bg=bg, fg=fg)

    def show_wall_clock(self, text: str):
        self.lbl_clock.config(text=text)

    def show_suggestions(self, candidates: list):
        self.suggest_box.delete(0, tk.END)
        if not candidates:
            self.show_suggestion_status("No cities found - you can still search manually")
            return
        self.lbl_suggest_status.pack_forget()
        for c in candidates:
            self.suggest_box.insert(tk.END, f"{c.name}  ·  {c.subtitle}")
        self.suggest_box.pack(after=self._suggest_anchor, fill=tk.X, padx=10)

    def show_suggestion_status(self, message: str):
        self.suggest_box.pack_forget()
        self.lbl_suggest_status.config(text=message)
        self.lbl_suggest_status.pack(after=self._suggest_anchor, fill=tk.X, padx=10)

    def clear_suggestions(self):
        self.suggest_box.delete(0, tk.END)
        self.suggest_box.pack_forget()
        self.lbl_suggest_status.pack_forget()


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────
def main():
    setup_logging()
    root = tk.Tk()
    PrayerClockApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
