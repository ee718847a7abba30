# src/primefinder/fmt.py
from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable

from primefinder.number_theory import is_mersenne_prime, is_prime, prime_factors
from primefinder.runtime import CFG

# Single source of truth for ANSI stripping
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(s: str | None) -> str:
    """Return s with ANSI escape sequences removed."""
    return "" if s is None else ANSI_RE.sub("", s)


def visible_len(s: str | None) -> int:
    """Printable length (without ANSI)."""
    return len(strip_ansi(s))


def format_int(n: int, sep: str | None = None) -> str:
    """1234567 -> '1,234,567' (separator from FORMATTING.THOUSANDS_SEPARATOR)."""
    if sep is None:
        sep = str(CFG("FORMATTING.THOUSANDS_SEPARATOR", ","))
    s = f"{n:,}"
    return s if sep == "," else s.replace(",", sep)


def format_factor_list(factors: Iterable[int], sep: str | None = None) -> str:
    """[2, 2, 3] -> '2 × 2 × 3'."""
    if sep is None:
        sep = str(CFG("FORMATTING.FACTOR_SEPARATOR", " × "))
    parts = [format_int(p) for p in factors]
    return sep.join(parts) if parts else "1"


def format_factorization(factors: Iterable[int], sep: str | None = None) -> str:
    """
    Turn a flat factor list into a tidy string like: 2^3 × 3^2 × 5
    """
    if sep is None:
        sep = str(CFG("FORMATTING.FACTOR_SEPARATOR", " × "))
    parts: list[str] = []
    for p, e in sorted(Counter(factors).items()):
        parts.append(f"{format_int(p)}^{e}" if e > 1 else format_int(p))
    return sep.join(parts) if parts else "1"


def describe(n: int) -> str:
    """
    Verdict text for n, one statement per line:

        1   -> "1 is defined as not a prime."
        97  -> "97 is a prime number."
        360 -> "360 is not a prime number.\\nPrime factors: 2 × 2 × 2 × 3 × 3 × 5"
    """
    shown = format_int(n)
    if n == 1:
        return f"{shown} is defined as not a prime."
    if n < 1:
        return f"{shown} is not a positive integer."
    if is_prime(n):
        lines = [f"{shown} is a prime number."]
        if is_mersenne_prime(n):
            lines.append(f"It is a Mersenne prime (2^{n.bit_length()} - 1).")
        return "\n".join(lines)

    factors = prime_factors(n)
    if CFG("FORMATTING.SHOW_POWERS", False):
        body = format_factorization(factors)
    else:
        body = format_factor_list(factors)
    return f"{shown} is not a prime number.\nPrime factors: {body}"


def format_duration(seconds: float) -> str:
    """ms if <1s; s with millis if <60s; else mm:ss.mmm (and hh:mm:ss.mmm if ≥1h)."""
    MAX_SECONDS = 60
    if seconds < 1:
        ms = round(seconds * 1000)
        return f"{ms} ms"
    if seconds < MAX_SECONDS:
        return f"{seconds:.3f} s"
    m, s = divmod(seconds, MAX_SECONDS)
    if m < MAX_SECONDS:
        return f"{int(m)}:{s:06.3f}"               # mm:ss.mmm
    h, m = divmod(int(m), MAX_SECONDS)
    return f"{h}:{m:02d}:{s:06.3f}"                # hh:mm:ss.mmm
