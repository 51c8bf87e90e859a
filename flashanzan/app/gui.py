from __future__ import annotations

"""Very simple Tkinter GUI for the flash anzan drill.

Home screen picks auto or manual mode; auto mode offers an interval slider.
Numbers are flashed one at a time, then the answer and the full list can be
shown. The auto-advance timer runs on the Tk event loop.
"""

import tkinter as tk
from tkinter import ttk
from typing import Any, Dict, Optional

from ..config.config import INTERVAL_MAX_S, INTERVAL_MIN_S, INTERVAL_STEP_S, load_config, validate_config
from ..util.randomness import seed_if_needed
from .display import format_interval, format_numbers, format_progress, screen_for
from .explain import enable as explain_enable
from .scheduler import TkScheduler
from .schema import SessionSnapshot
from .session_manager import STATE_CHANGED, SessionManager


BUTTON_CLASSES = ("TButton", "Button")


def key_advances(widget: Any) -> bool:
    """Whether a Space/Return press on the window should advance.

    A focused button already invokes itself on Space, so the window-level
    binding must not advance a second time.
    """
    try:
        return widget.winfo_class() not in BUTTON_CLASSES
    except (AttributeError, tk.TclError):
        return True


class App(tk.Tk):
    def __init__(self, cfg: Dict[str, Any]) -> None:
        super().__init__()
        gui_cfg = cfg["gui"]
        session_cfg = cfg["session"]
        self.title(str(gui_cfg["title"]))
        self.geometry("440x560")
        self._font_size = int(gui_cfg["font_size"])

        self.interval_var = tk.DoubleVar(value=float(session_cfg["interval_s"]))
        self.interval_label_var = tk.StringVar(value="")
        self.number_var = tk.StringVar(value="")
        self.progress_var = tk.StringVar(value="")
        self.answer_var = tk.StringVar(value="")

        self.sm = SessionManager(
            TkScheduler(self),
            mode=session_cfg["mode"],
            interval_s=float(session_cfg["interval_s"]),
        )
        self.sm.events.subscribe(STATE_CHANGED, self.render)

        self._frames: Dict[str, ttk.Frame] = {}
        self._current_screen: Optional[str] = None
        container = ttk.Frame(self)
        container.pack(side=tk.TOP, fill=tk.BOTH, expand=True, padx=16, pady=16)
        ttk.Label(container, text=str(gui_cfg["title"]), font=("TkDefaultFont", 20, "bold")).pack(side=tk.TOP, pady=(0, 12))
        self._body = ttk.Frame(container)
        self._body.pack(side=tk.TOP, fill=tk.BOTH, expand=True)

        self._build_home()
        self._build_setup()
        self._build_running()
        self._build_finished()
        self._build_answer()
        self._build_numbers()

        # Keyboard advance for manual mode
        self.bind("<space>", self._on_key_next)
        self.bind("<Return>", self._on_key_next)
        self.protocol("WM_DELETE_WINDOW", self._on_close)

        self.render(self.sm.snapshot())

    # --- screens ---

    def _frame(self, name: str) -> ttk.Frame:
        frm = ttk.Frame(self._body)
        self._frames[name] = frm
        return frm

    def _build_home(self) -> None:
        frm = self._frame("home")
        ttk.Label(frm, text="Choose your mode:").pack(side=tk.TOP, pady=(12, 18))
        ttk.Button(frm, text="Auto Mode", command=lambda: self.sm.set_mode("auto")).pack(side=tk.TOP, fill=tk.X, pady=6)
        ttk.Button(frm, text="Manual Mode", command=lambda: self.sm.set_mode("manual")).pack(side=tk.TOP, fill=tk.X, pady=6)

    def _build_setup(self) -> None:
        frm = self._frame("setup")
        self._interval_box = ttk.Frame(frm)
        ttk.Label(self._interval_box, textvariable=self.interval_label_var).pack(side=tk.TOP, anchor=tk.W)
        tk.Scale(
            self._interval_box,
            from_=INTERVAL_MIN_S,
            to=INTERVAL_MAX_S,
            resolution=INTERVAL_STEP_S,
            orient=tk.HORIZONTAL,
            showvalue=False,
            variable=self.interval_var,
            command=self._on_interval,
        ).pack(side=tk.TOP, fill=tk.X)
        scale_ends = ttk.Frame(self._interval_box)
        scale_ends.pack(side=tk.TOP, fill=tk.X)
        ttk.Label(scale_ends, text=format_interval(INTERVAL_MIN_S)).pack(side=tk.LEFT)
        ttk.Label(scale_ends, text=format_interval(INTERVAL_MAX_S)).pack(side=tk.RIGHT)
        self._setup_buttons = ttk.Frame(frm)
        self._setup_buttons.pack(side=tk.BOTTOM, fill=tk.X)
        ttk.Button(self._setup_buttons, text="Start", command=self.sm.start_game).pack(side=tk.TOP, fill=tk.X, pady=6)
        ttk.Button(self._setup_buttons, text="Home", command=self.sm.go_home).pack(side=tk.TOP, fill=tk.X, pady=6)

    def _build_running(self) -> None:
        frm = self._frame("running")
        ttk.Label(frm, textvariable=self.number_var, font=("TkDefaultFont", self._font_size, "bold"), anchor=tk.CENTER).pack(side=tk.TOP, fill=tk.X, pady=(24, 8))
        ttk.Label(frm, textvariable=self.progress_var, anchor=tk.CENTER).pack(side=tk.TOP, fill=tk.X)
        self._next_button = ttk.Button(frm, text="Next", command=self._on_next)

    def _build_finished(self) -> None:
        frm = self._frame("finished")
        ttk.Label(frm, text="What is the total?").pack(side=tk.TOP, pady=(24, 12))
        ttk.Button(frm, text="Show Answer", command=self.sm.reveal_answer).pack(side=tk.TOP, fill=tk.X, pady=6)

    def _build_answer(self) -> None:
        frm = self._frame("showingAnswer")
        ttk.Label(frm, text="The answer is:").pack(side=tk.TOP, pady=(12, 4))
        ttk.Label(frm, textvariable=self.answer_var, font=("TkDefaultFont", self._font_size, "bold")).pack(side=tk.TOP, pady=(0, 12))
        ttk.Button(frm, text="Check Numbers", command=self.sm.inspect_numbers).pack(side=tk.TOP, fill=tk.X, pady=6)
        row = ttk.Frame(frm)
        row.pack(side=tk.TOP, fill=tk.X)
        ttk.Button(row, text="Reset", command=self.sm.reset).pack(side=tk.LEFT, expand=True, fill=tk.X, padx=(0, 4))
        ttk.Button(row, text="Home", command=self.sm.go_home).pack(side=tk.LEFT, expand=True, fill=tk.X, padx=(4, 0))

    def _build_numbers(self) -> None:
        frm = self._frame("showingNumbers")
        ttk.Label(frm, text="All Numbers:").pack(side=tk.TOP, anchor=tk.W)
        self._numbers_text = tk.Text(frm, height=9, width=24, font=("TkFixedFont", 14))
        self._numbers_text.pack(side=tk.TOP, fill=tk.BOTH, expand=True, pady=6)
        ttk.Button(frm, text="Back", command=self.sm.back_from_inspect).pack(side=tk.TOP, fill=tk.X, pady=6)

    # --- events ---

    def _on_next(self) -> None:
        if self.sm.mode == "manual":
            self.sm.advance()

    def _on_key_next(self, event: Any) -> None:
        if key_advances(event.widget):
            self._on_next()

    def _on_interval(self, value: str) -> None:
        self.sm.set_interval(round(float(value), 1))

    def _on_close(self) -> None:
        # Cancel any pending auto-advance before tearing down Tk
        self.sm.reset()
        self.destroy()

    # --- rendering ---

    def _show(self, name: str) -> None:
        if name == self._current_screen:
            return
        if self._current_screen is not None:
            self._frames[self._current_screen].pack_forget()
        self._frames[name].pack(side=tk.TOP, fill=tk.BOTH, expand=True)
        self._current_screen = name

    def render(self, snap: SessionSnapshot) -> None:
        screen = screen_for(snap)
        self.interval_label_var.set(f"Time Interval: {format_interval(snap.interval_s)}")
        if screen == "setup":
            if snap.mode == "auto":
                self._interval_box.pack(side=tk.TOP, fill=tk.X, before=self._setup_buttons, pady=(0, 12))
            else:
                self._interval_box.pack_forget()
        elif screen == "running":
            self.number_var.set("" if snap.current_number is None else str(snap.current_number))
            self.progress_var.set(format_progress(snap.current_index, snap.total))
            if snap.mode == "manual":
                self._next_button.pack(side=tk.TOP, fill=tk.X, pady=12)
            else:
                self._next_button.pack_forget()
        elif screen == "showingAnswer":
            self.answer_var.set(str(snap.answer))
        elif screen == "showingNumbers":
            self._numbers_text.configure(state=tk.NORMAL)
            self._numbers_text.delete("1.0", tk.END)
            self._numbers_text.insert(tk.END, format_numbers(snap.numbers))
            self._numbers_text.insert(tk.END, f"\n\nTotal: {snap.answer}")
            self._numbers_text.configure(state=tk.DISABLED)
        self._show(screen)


def main(config_path: Optional[str] = None, explain: bool = False) -> int:
    seed_if_needed()
    cfg = validate_config(load_config(config_path))
    if explain or cfg.get("explain"):
        explain_enable(True)
    app = App(cfg)
    app.mainloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
