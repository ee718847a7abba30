# src/primefinder/cli.py

"""
PrimeFinder - primes, prime factors and divisors of 64-bit integers

Description:
    Checks whether a positive integer is prime, shows its prime
    factorization and, on request, lists all of its factors. Listing
    factors runs in the background; a spinner appears when it is slow.

usage: see primefinder -h
"""

from __future__ import annotations

import argparse
import faulthandler
import os
import sys
import textwrap
import threading
import traceback
from importlib.resources import files as pkg_files
from time import perf_counter

from colorama import Fore, Style
from colorama import init as colorama_init

import primefinder.config as CONFIG
from primefinder.controller import CalculationController
from primefinder.display import (
    print_divisors,
    print_history,
    print_profiles_with_descriptions,
    print_result,
    screen_header,
    show_effective_settings,
    show_help,
)
from primefinder.fmt import format_int
from primefinder.history import History
from primefinder.number_theory import BOUND, find_next_prime, find_previous_prime
from primefinder.progress import Spinner
from primefinder.runtime import APPLY, CFG
from primefinder.runtime import current as _rt_current
from primefinder.utility import UserInputError, flatten_dotted, typename
from primefinder.validator import InvalidInputError, parse
from primefinder.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir

_POLL_S = 0.05
_DEL_ARGS = 3
_WORKSPACE_COMMANDS = ("init", "where")


class Session:
    """State of one interactive run: current number, last factor list, history."""

    def __init__(self, profile: str):
        self.profile = profile
        self.n: int | None = None
        self.divisors: list[int] = []
        self.history = History()
        self._done = threading.Event()
        self._slow = threading.Event()
        self._result: list[int] | None = None
        self._error: BaseException | None = None
        self.controller = CalculationController(
            on_result=self._on_result,
            on_slow=self._slow.set,
            on_error=self._on_error,
        )

    def _on_result(self, divisors: list[int]) -> None:
        self._result = divisors
        self._done.set()

    def _on_error(self, exc: BaseException) -> None:
        self._error = exc
        self._done.set()

    def check(self, n: int) -> None:
        """Show the verdict for n, make it current and record it."""
        self.controller.cancel()
        self.n = n
        self.divisors = []
        text = print_result(n)
        self.history.add(n, text)

    def expand(self) -> list[int] | None:
        """List all factors of the current number; None if cancelled."""
        if self.n is None:
            print("Enter a number first.")
            return None
        n = self.n
        self._done.clear()
        self._slow.clear()
        self._result = None
        self._error = None

        spinner = Spinner(enabled=sys.stdout.isatty())
        t0 = perf_counter()
        self.controller.start(n)
        try:
            while not self._done.wait(_POLL_S):
                if self._slow.is_set():
                    spinner.update(f"Calculating factors of {format_int(n)}…")
        except KeyboardInterrupt:
            self.controller.cancel()
            spinner.done()
            print(f"{Fore.YELLOW}Cancelled.{Style.RESET_ALL}")
            return None
        spinner.done()

        if self._error is not None:
            raise self._error
        self.divisors = self._result or []
        print_divisors(n, self.divisors, elapsed_s=perf_counter() - t0)
        return self.divisors

    def close(self) -> None:
        self.controller.close()


def _install_loud_error_handlers(debug: bool) -> None:
    if not debug:
        return
    # Always show full Python tracebacks
    faulthandler.enable()

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook

    # Worker and timer threads of the calculation controller
    def _thread_excepthook(args):
        sys.stderr.write("\n[UNCAUGHT THREAD EXCEPTION]\n")
        traceback.print_exception(args.exc_type, args.exc_value, args.exc_traceback, file=sys.stderr)
        sys.stderr.flush()
    threading.excepthook = _thread_excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    if not (msg.startswith("Invalid input:") or msg.startswith("Error:")):
        msg = f"{Fore.RED}Error:{Style.RESET_ALL} {msg}"
    print(msg, file=sys.stderr)


def _print_invalid(e: InvalidInputError) -> None:
    print(f"{Fore.RED}Invalid input:{Style.RESET_ALL} {e}", file=sys.stderr)


def _looks_numeric(s: str) -> bool:
    t = s.strip().lstrip("-").strip()
    return bool(t) and t[0].isdigit()


def _resolve_inputs(items: list[str]) -> tuple[str | None, int | None]:
    """Return (profile, number) based on the first two positionals.

    Rules:
      - An item that starts like a number is parsed strictly (may raise
        InvalidInputError); anything else is a profile name or command.
      - With two items the first non-numeric one is the profile.
    """
    profile: str | None = None
    number: int | None = None
    for item in items[:2]:
        if _looks_numeric(item):
            if number is None:
                number = parse(item)
        elif profile is None:
            profile = item
    return profile, number


def _select_profile_name(explicit: str | None) -> str:
    """
    Precedence:
      1) explicit profile argument
      2) last used (from workspace)
      3) 'default'
    """
    if explicit:
        return explicit
    last = CONFIG.read_current_profile()
    if last and CONFIG.has_profile(last):
        return last
    return "default"


def _apply_profile(name: str) -> None:
    selected = CONFIG.load_settings(name)
    APPLY(selected)
    if _rt_current().debug:
        print(f"[debug] active profile: {selected.name}", file=sys.stderr)
        if selected._source:
            print(f"[debug] profile file: {selected._source}", file=sys.stderr)
        flat = flatten_dotted(selected.data)
        for k in sorted(flat, key=str.lower):
            v = CFG(k, None)
            print(f"        {k:.<40} {v!r} ({typename(v)})", file=sys.stderr)
        print(file=sys.stderr)


def _workspace_command(items: list[str]) -> int:
    """`init`, `init overwrite` and `where`; returns an exit code."""
    cmd, *rest = [s.lower() for s in items]
    if cmd == "where":
        print(f"Workspace: {workspace_dir()}")
        print(f"Package:   {pkg_files('primefinder')}")
        return 0

    if rest == ["overwrite"]:
        if os.environ.get("PRIMEFINDER_DEV") != "1":
            print("Refusing to overwrite: set PRIMEFINDER_DEV=1 to enable developer overwrite.")
            return 2
        ws, copied = seed_workspace(overwrite=True)
        print(f"Workspace ready at: {ws} (overwrote existing files)")
    else:
        ws, copied = ensure_workspace_seeded()
        print(f"Workspace ready at: {ws}")
    print(f"Copied -> profiles: {copied}")
    return 0


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      init
          Create the workspace folder and copy packaged sample profiles if missing.

      init overwrite
          Meant for developers. Requires environment variable PRIMEFINDER_DEV=1.
          Replaces the sample profiles in the workspace.

      where
          Show the workspace and package paths.
    """)

    p = argparse.ArgumentParser(
        prog="primefinder",
        description="PrimeFinder — primes, prime factors & divisors",
        usage=(
            "primefinder [[profile] [integer]] [--expand] [--debug]\n"
            "       primefinder -h | --help\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="[[profile] integer]]",
                   help="optional profile name followed by an integer to check")
    p.add_argument("--expand", action="store_true", help="Also list all factors of the integer")
    p.add_argument("--no-color", action="store_true", help="Disable colored output")
    p.add_argument("--debug", action="store_true", help="Show timings and internal trace info")
    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except InvalidInputError as e:
        _print_invalid(e)
        return 2
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        debug = "--debug" in (argv if argv is not None else sys.argv)
        if debug:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


# ---- main ----
def _main_impl(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    colorama_init(autoreset=True, strip=True if args.no_color else None)

    if args.debug:
        _rt_current().debug = True
    _install_loud_error_handlers(args.debug)

    # Ensure a first-run workspace seed silently
    ensure_workspace_seeded()

    profile, n = _resolve_inputs(args.items)

    if profile in _WORKSPACE_COMMANDS:
        return _workspace_command(args.items)

    if profile and not CONFIG.has_profile(profile):
        print(f"Unknown profile: '{profile}'")
        print("Available profiles:", ", ".join(CONFIG.list_all_profiles()))
        return 2

    profile_name = _select_profile_name(profile)
    try:
        _apply_profile(profile_name)
    except FileNotFoundError as e:
        print(f"Failed to load profile: {e}\n", file=sys.stderr)
        # continue with built-in defaults

    # --- one-shot number path ---
    if n is not None:
        session = Session(profile_name)
        try:
            session.check(n)
            if args.expand and session.expand() is None:
                return 130
        finally:
            session.close()
        return 0

    return _repl(profile_name)


def _repl(profile_name: str) -> int:
    print(screen_header())
    session = Session(profile_name)
    try:
        while True:
            try:
                prompt = f"\nProfile: {session.profile} — Enter an integer or command (h=Help, q=Quit): "
                user_input = input(prompt).strip()
                if not _dispatch(session, user_input):
                    break
            except (EOFError, KeyboardInterrupt):
                print()
                break
            except InvalidInputError as e:
                _print_invalid(e)
            except UserInputError as e:
                _print_user_error(str(e))
            except Exception as e:
                if _rt_current().debug:
                    traceback.print_exc()
                else:
                    _print_user_error(f"{e.__class__.__name__}: {e}")
    finally:
        session.close()
    return 0


def _dispatch(session: Session, user_input: str) -> bool:
    """Handle one REPL line. Returns False to quit."""
    low = user_input.lower()
    if low in {"", "q", "quit"}:
        return False

    if low in {"h", "help"}:
        show_help()
        return True

    if low in {"e", "expand"}:
        session.expand()
        return True

    if low in {"n", "next", "b", "prev"}:
        if session.n is None:
            print("Enter a number first.")
            return True
        forward = low in {"n", "next"}
        found = find_next_prime(session.n) if forward else find_previous_prime(session.n)
        if found is None:
            where = f"above {format_int(session.n)} (max {format_int(BOUND)})" if forward \
                else f"below {format_int(session.n)}"
            print(f"{Fore.YELLOW}There is no prime {where}.{Style.RESET_ALL}")
        else:
            session.check(found)
        return True

    if low.startswith("#"):
        try:
            k = int(low[1:])
        except ValueError:
            raise UserInputError(f"'{user_input}' is not a factor number, use #1, #2, ...") from None
        if not 1 <= k <= len(session.divisors):
            raise UserInputError(f"no factor #{k}; list factors first with 'e'.")
        session.check(session.divisors[k - 1])
        return True

    if low.startswith("hist"):
        parts = low.split()
        if len(parts) == 1:
            print_history(session.history)
        elif parts[1] == "clear":
            session.history.clear()
            print("History cleared.")
        elif parts[1] == "del" and len(parts) == _DEL_ARGS and parts[2].isdigit():
            k = int(parts[2])
            if not 1 <= k <= len(session.history):
                raise UserInputError(f"no history entry {k}.")
            item = session.history.remove(k - 1)
            print(f"Removed {format_int(item.n)} from history.")
        else:
            print("Usage: HIST [clear | del k]")
        return True

    if low == "p":
        print_profiles_with_descriptions()
        return True

    if low == "s":
        show_effective_settings()
        return True

    if low.split()[0] in _WORKSPACE_COMMANDS:
        _workspace_command(low.split())
        return True

    # bare "debug" is left to the profile switch below
    if low.startswith("debug "):
        parts = low.split()
        rt = _rt_current()
        if parts[1] == "status":
            print(f"Debug is currently {'ON' if rt.debug else 'OFF'}.")
        elif parts[1] in {"on", "off"}:
            rt.debug = parts[1] == "on"
            print(f"Debug mode {'enabled' if rt.debug else 'disabled'} for this session.")
        else:
            print("Usage: DEBUG [on|off|status]")
        return True

    if _looks_numeric(user_input):
        session.check(parse(user_input))
        return True

    # treat as profile switch
    if CONFIG.has_profile(user_input):
        _apply_profile(user_input)
        try:
            session.controller.slow_threshold = CFG("CONTROLLER.SLOW_THRESHOLD_S", 1.0)
        except (TypeError, ValueError) as e:
            _apply_profile(session.profile)
            raise UserInputError(f"profile '{user_input}': bad CONTROLLER.SLOW_THRESHOLD_S ({e})") from None
        CONFIG.write_current_profile(user_input)
        session.profile = user_input
        print(f"Applied profile: {session.profile}")
        return True

    print(f"{Fore.RED}Invalid input: {Style.RESET_ALL}'{user_input}'. Type H for help.")
    return True


if __name__ == "__main__":
    raise SystemExit(main())
