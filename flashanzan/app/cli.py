from __future__ import annotations

"""Terminal front end for Flash Anzan using SessionManager."""

import argparse
import sys
from typing import Callable, Optional

from .. import __version__
from ..config.config import clamp_interval, load_config, validate_config
from ..drills.sequence import generate_numbers, prefix_sums
from ..util.randomness import make_rng, seed_if_needed
from .display import format_interval, format_numbers, format_progress, format_signed, format_summary
from .explain import enable as explain_enable
from .scheduler import LoopScheduler
from .schema import SessionSnapshot
from .session_manager import STATE_CHANGED, SessionManager

Ask = Callable[[str], str]

CLEAR_LINE = "\r\x1b[K"
UP_AND_CLEAR = "\x1b[1A\x1b[K"


class TerminalView:
    """Prints session snapshots.

    On a TTY the current number is redrawn in place so earlier numbers do
    not stay on screen.
    """

    def __init__(self, overwrite: Optional[bool] = None) -> None:
        self.overwrite = sys.stdout.isatty() if overwrite is None else overwrite
        self._on_screen = False

    def _flash(self, text: str, mode: str, final: bool = False) -> None:
        if not self.overwrite:
            print(text)
            return
        if self._on_screen:
            # Manual mode: Enter already moved the cursor below the number
            print(CLEAR_LINE if mode == "auto" else UP_AND_CLEAR, end="")
        print(text, end="\n" if final else "", flush=True)
        self._on_screen = not final

    def render(self, snap: SessionSnapshot) -> None:
        if snap.phase == "running" and snap.current_number is not None:
            self._flash(f"{format_progress(snap.current_index, snap.total)}:  {snap.current_number}", snap.mode)
        elif snap.phase == "finished":
            self._flash("Done! What is the total?", snap.mode, final=True)
        elif snap.phase == "showingAnswer":
            print(format_summary(snap))
        elif snap.phase == "showingNumbers":
            print("Numbers:")
            print(format_numbers(snap.numbers))
            print(f"Total: {snap.answer}")
        elif snap.phase == "idle":
            self._on_screen = False
            if snap.mode == "home":
                print("Home.")
            else:
                print(f"Ready: {snap.mode} mode, interval {format_interval(snap.interval_s)}")


def _ask_mode(ask: Ask) -> Optional[str]:
    while True:
        choice = ask("Choose your mode: [a]uto, [m]anual, [q]uit: ").strip().lower()
        if choice in ("a", "auto"):
            return "auto"
        if choice in ("m", "manual"):
            return "manual"
        if choice in ("q", "quit"):
            return None
        print(f"Unknown choice '{choice}'.")


def play_round(sm: SessionManager, scheduler: LoopScheduler, ask: Ask) -> str:
    """Run one drill from start to the answer screen.

    Returns "again" when the user resets for another go, "home" otherwise.
    """
    if sm.mode == "manual":
        print("Press Enter to show the next number, 'h' + Enter to go home.")
    sm.start_game()
    while sm.phase == "running":
        if sm.mode == "auto":
            if not scheduler.run_once():
                break
            continue
        if ask("").strip().lower() in ("h", "q"):
            sm.go_home()
            return "home"
        sm.advance()

    ask("Press Enter to reveal the answer...")
    sm.reveal_answer()
    while True:
        choice = ask("[c] check numbers, [r] reset and go again, [h] home: ").strip().lower()
        if choice == "c":
            sm.inspect_numbers()
            ask("Press Enter to go back...")
            sm.back_from_inspect()
        elif choice == "r":
            sm.reset()
            return "again"
        elif choice in ("h", "q"):
            sm.go_home()
            return "home"
        else:
            print(f"Unknown choice '{choice}'.")


def _cmd_generate(args: argparse.Namespace) -> int:
    seed_if_needed()
    rng = make_rng(args.seed) if args.seed is not None else None
    for _ in range(max(1, args.count)):
        nums = generate_numbers(rng)
        sums = ", ".join(str(s) for s in prefix_sums(nums))
        print(f"{' '.join(format_signed(n) for n in nums)}  = {sum(nums)}  (running: {sums})")
    return 0


def _cmd_run(args: argparse.Namespace, ask: Ask) -> int:
    seed_if_needed()
    cfg = validate_config(load_config(args.config))
    if args.explain or cfg.get("explain"):
        explain_enable(True)

    session_cfg = cfg["session"]
    mode = args.mode or session_cfg["mode"]
    if mode == "home":
        mode = _ask_mode(ask)
        if mode is None:
            return 0
    interval_s = clamp_interval(args.interval) if args.interval is not None else float(session_cfg["interval_s"])
    rng = make_rng(args.seed) if args.seed is not None else None

    scheduler = LoopScheduler()
    sm = SessionManager(scheduler, mode=mode, interval_s=interval_s, rng=rng)
    view = TerminalView()
    sm.events.subscribe(STATE_CHANGED, view.render)

    print(f"Starting Flash Anzan in {mode} mode" + (f" ({format_interval(interval_s)} per number)." if mode == "auto" else "."))
    while play_round(sm, scheduler, ask) == "again":
        pass
    return 0


def main(argv: list[str] | None = None, ask: Ask = input) -> int:
    p = argparse.ArgumentParser(prog="flashanzan", description="Flash anzan mental arithmetic drill")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    sub = p.add_subparsers(dest="cmd")

    gp = sub.add_parser("generate", help="Print drill sequences")
    gp.add_argument("--seed", type=int, default=None)
    gp.add_argument("--count", type=int, default=1)

    rp = sub.add_parser("run", help="Run a drill in the terminal")
    rp.add_argument("--config", default=None, help="Path to YAML config")
    rp.add_argument("--mode", choices=["auto", "manual"], default=None)
    rp.add_argument("--interval", type=float, default=None, help="Seconds per number in auto mode (0..10)")
    rp.add_argument("--seed", type=int, default=None)
    rp.add_argument("--explain", action="store_true")

    up = sub.add_parser("gui", help="Launch the Tkinter app")
    up.add_argument("--config", default=None, help="Path to YAML config")
    up.add_argument("--explain", action="store_true")

    args = p.parse_args(argv)

    if args.version:
        print(f"flashanzan {__version__}")
        return 0

    if args.cmd == "generate":
        return _cmd_generate(args)

    if args.cmd == "run":
        try:
            return _cmd_run(args, ask)
        except (KeyboardInterrupt, EOFError):
            print()
            return 130

    if args.cmd == "gui":
        from .gui import main as gui_main
        return gui_main(args.config, explain=args.explain)

    p.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
