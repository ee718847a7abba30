# -----------------------------------------------------------------------------
#  number_theory.py
#  Primality, factorization, divisors and prime navigation on 64-bit inputs
# -----------------------------------------------------------------------------

from __future__ import annotations

import gmpy2

U64_MAX = (1 << 64) - 1

# Largest accepted input. One below the 64-bit ceiling so that n + 1 always
# fits in an unsigned 64-bit integer.
BOUND = U64_MAX - 1


def _isqrt(n: int) -> int:
    """Exact floor(sqrt(n)); never a float estimate."""
    return int(gmpy2.isqrt(n))


def is_prime(n: int) -> bool:
    """
    Deterministic trial division by 2, 3 and the 6k ± 1 candidates up to
    isqrt(n) inclusive.
    """
    if n < 2:
        return False
    if n in (2, 3):
        return True
    if n % 2 == 0 or n % 3 == 0:
        return False

    limit = _isqrt(n)
    i = 5
    while i <= limit:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


def is_mersenne_prime(n: int) -> bool:
    """True iff n is prime and n + 1 is a power of two (n = 2^k - 1)."""
    if n < 2 or n + 1 > U64_MAX:
        return False
    if (n + 1) & n:
        return False
    return is_prime(n)


def prime_factors(n: int) -> list[int]:
    """
    Prime factors of n with multiplicity, in non-decreasing order.

    >>> prime_factors(360)
    [2, 2, 2, 3, 3, 5]
    """
    factors: list[int] = []
    if n < 2:
        return factors

    while n % 2 == 0:
        factors.append(2)
        n //= 2

    d = 3
    while d * d <= n:
        while n % d == 0:
            factors.append(d)
            n //= d
        d += 2

    # Whatever is left has no divisor up to its square root
    if n > 1:
        factors.append(n)
    return factors


def all_factors(n: int) -> list[int]:
    """
    Divisors of n excluding 1 and n itself, ascending and without duplicates.
    Empty for primes and for n < 2.

    >>> all_factors(28)
    [2, 4, 7, 14]
    """
    if n < 2:
        return []

    small: list[int] = []
    large: list[int] = []
    for i in range(2, _isqrt(n) + 1):
        if n % i:
            continue
        small.append(i)
        pair = n // i
        if pair != i and pair != n:
            large.append(pair)
    large.reverse()
    return small + large


def find_next_prime(start: int) -> int | None:
    """Smallest prime p with start < p <= BOUND, or None."""
    if start >= BOUND:
        return None
    candidate = max(start + 1, 2)
    while candidate <= BOUND:
        if is_prime(candidate):
            return candidate
        candidate += 1
    return None


def find_previous_prime(start: int) -> int | None:
    """Largest prime p with p < start, or None. None for start <= 2."""
    if start <= 2:
        return None
    candidate = min(start - 1, BOUND)
    while candidate >= 2:
        if is_prime(candidate):
            return candidate
        candidate -= 1
    return None
