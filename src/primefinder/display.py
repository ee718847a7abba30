# src/primefinder/display.py
from __future__ import annotations

import time

from colorama import Fore, Style

from primefinder import __version__
from primefinder.config import list_profiles_with_descriptions
from primefinder.fmt import describe, format_duration, format_int, visible_len
from primefinder.history import History
from primefinder.number_theory import BOUND, is_prime
from primefinder.runtime import CFG
from primefinder.runtime import current as _rt_current
from primefinder.utility import flatten_dotted, get_terminal_width, typename


def screen_header() -> str:
    return f"{Fore.YELLOW}{Style.BRIGHT}PrimeFinder v{__version__} — primes, factors & divisors{Style.RESET_ALL}"


def print_result(n: int) -> str:
    """Print the verdict for n and return the plain text (for history)."""
    text = describe(n)
    first, *rest = text.split("\n")
    color = Fore.GREEN if is_prime(n) else Fore.BLUE
    print(f"{color}{Style.BRIGHT}{first}{Style.RESET_ALL}")
    for line in rest:
        print(f"{color}{line}{Style.RESET_ALL}")
    return text


def print_divisors(n: int, divisors: list[int], elapsed_s: float | None = None) -> None:
    """Numbered list of all divisors of n except 1 and n."""
    print(f"{Fore.CYAN}{Style.BRIGHT}All factors of {format_int(n)}{Style.RESET_ALL}")
    if not divisors:
        why = "it is prime" if is_prime(n) else "it has none besides 1 and itself"
        print(f"  {Style.DIM}(no factors to list: {why}){Style.RESET_ALL}")
        return

    width = max(40, get_terminal_width())
    idx_w = len(str(len(divisors)))
    cells = [f"{Style.DIM}{i:>{idx_w}}.{Style.RESET_ALL} {format_int(d)}" for i, d in enumerate(divisors, 1)]
    cell_w = max(visible_len(c) for c in cells) + 3
    per_row = max(1, (width - 2) // cell_w)
    for start in range(0, len(cells), per_row):
        row = cells[start:start + per_row]
        print("  " + "".join(c + " " * (cell_w - visible_len(c)) for c in row).rstrip())

    if elapsed_s is not None and CFG("DISPLAY.SHOW_TIMINGS", False):
        print(f"  {Style.DIM}{len(divisors)} factor(s) in {format_duration(elapsed_s)}{Style.RESET_ALL}")


def print_history(history: History) -> None:
    if not len(history):
        print("History is empty.")
        return
    for i, item in enumerate(history, 1):
        ts = time.strftime("%H:%M:%S", time.localtime(item.timestamp))
        first = item.result.split("\n", 1)[0]
        print(f"{Style.DIM}{i:>3}  {ts}{Style.RESET_ALL}  {format_int(item.n):<26}  {first}")


def print_profiles_with_descriptions() -> None:
    current = _rt_current().profile_name
    for name, desc in list_profiles_with_descriptions():
        mark = f"{Fore.GREEN}*{Style.RESET_ALL}" if name == current else " "
        print(f" {mark} {Style.BRIGHT}{name:<16}{Style.RESET_ALL} {desc}")


def show_effective_settings() -> None:
    flat = flatten_dotted(_rt_current().settings)
    if not flat:
        print("(built-in defaults, no profile applied)")
        return
    for k in sorted(flat, key=str.lower):
        v = flat[k]
        print(f"  {k:.<40} {v!r} ({typename(v)})")


def show_help() -> None:
    lines = [
        "",
        screen_header(),
        f"{'-' * 72}",
        "Enter a positive integer to check whether it is prime and see its prime factors.",
        f"Accepted range: 1 to {format_int(BOUND)}.",
        "Commas, underscores and single spaces are allowed as thousands separators.",
        "",
        f"{Fore.MAGENTA}{Style.BRIGHT}Commands:{Style.RESET_ALL}",
        "  e, expand        list all factors of the current number (Ctrl-C cancels)",
        "  #k               check the k-th factor from the last list",
        "  n, next          jump to the next prime",
        "  b, prev          jump to the previous prime",
        "  hist             show the history of checked numbers",
        "  hist del k       remove entry k from the history",
        "  hist clear       clear the history",
        "  p                list profiles; type a profile name to switch",
        "  s                show the effective settings",
        "  where            show the workspace folder",
        "  init             copy missing sample profiles into the workspace",
        "  debug on|off|status",
        "  h, help          show this help",
        "  q, quit          quit",
        "",
        f"{Fore.CYAN}Good to know:{Style.RESET_ALL}",
        " • A Mersenne prime is a prime of the form 2^k - 1, e.g. 8,191.",
        " • 1 is by definition not a prime.",
        " • Listing factors of a large number can take a while; a spinner shows up",
        f"   after {CFG('CONTROLLER.SLOW_THRESHOLD_S', 1.0):g} s.",
        "",
    ]
    print("\n".join(lines))
