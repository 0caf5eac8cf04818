"""
Chromosome-name normalization under the ignore-level policy.

Graph paths carry decorated names such as ``HG002#1#chr7`` or
``GRCh38.chr12_random``. The ignore level decides whether such a name is kept
and how it is rewritten:

==  =======================================================================
0   Keep as-is (no checks).
1   Keep only if the name contains "chr" (case-insensitive).
2   As 1, and the token after "chr" must be a digit run or one of X/Y/M.
3   As 2, and nothing may follow the token (drops "chr12_random").
4   Keep only the standard human set {1..22, X, Y, M}; output "chr{TOKEN}".
5   As 4, but output only "{TOKEN}".
==  =======================================================================

The token is captured after the *last* occurrence of "chr", so assembly
prefixes that happen to contain the marker do not shadow the meaningful one.
"""

from dataclasses import dataclass
from enum import IntEnum

__all__ = [
    "ChromToken",
    "IgnoreLevel",
    "STANDARD_CHROMOSOMES",
    "canonical_chrom_key",
    "normalize_chrom",
    "parse_chrom_token",
]

MARKER = "chr"

STANDARD_CHROMOSOMES = frozenset([str(n) for n in range(1, 23)] + ["X", "Y", "M"])

_TOKEN_LETTERS = {"X", "Y", "M"}


class IgnoreLevel(IntEnum):
    """Chromosome-name policy levels."""

    KEEP_ALL = 0
    REQUIRE_MARKER = 1
    REQUIRE_TOKEN = 2
    REJECT_SUFFIX = 3
    STANDARD_PREFIXED = 4
    STANDARD_BARE = 5


@dataclass(frozen=True)
class ChromToken:
    """Result of capturing the chromosome token from a raw name."""

    raw: str
    canonical: str | None
    has_trailing_suffix: bool
    contains_marker: bool

    @property
    def is_standard(self) -> bool:
        return self.canonical in STANDARD_CHROMOSOMES


def _canonical_digits(digits: str) -> str:
    # "07" and "7" name the same chromosome
    return digits.lstrip("0") or "0"


def parse_chrom_token(raw: str) -> ChromToken:
    """
    Capture the token following the last case-insensitive "chr".

    The token is either a maximal run of digits or a single X/Y/M letter,
    returned uppercased. Any other character ends the token; remaining
    content marks a trailing suffix.
    """
    idx = raw.lower().rfind(MARKER)
    if idx < 0:
        return ChromToken(raw, None, False, False)

    tail = raw[idx + len(MARKER):]
    digits = []
    for ch in tail:
        if ch.isascii() and ch.isdigit():
            digits.append(ch)
        else:
            break

    if digits:
        token = _canonical_digits("".join(digits))
        consumed = len(digits)
    elif tail and tail[0].upper() in _TOKEN_LETTERS:
        token = tail[0].upper()
        consumed = 1
    else:
        return ChromToken(raw, None, bool(tail), True)

    return ChromToken(raw, token, len(tail) > consumed, True)


def normalize_chrom(raw: str, level: int = IgnoreLevel.KEEP_ALL) -> str | None:
    """
    Apply the ignore-level policy to a chromosome or path name.

    Args:
        raw: Chromosome, contig or path name.
        level: Ignore level 0-5. Unrecognized levels behave as level 0.

    Digit tokens lose their leading zeros at levels 4 and 5, so
    "HG002#1#chr07" is written as "chr7" rather than "chr07".

    Returns:
        The kept (possibly rewritten) name, or None if the name is rejected.
    """
    if level == IgnoreLevel.REQUIRE_MARKER:
        return raw if MARKER in raw.lower() else None

    if level in (
        IgnoreLevel.REQUIRE_TOKEN,
        IgnoreLevel.REJECT_SUFFIX,
        IgnoreLevel.STANDARD_PREFIXED,
        IgnoreLevel.STANDARD_BARE,
    ):
        token = parse_chrom_token(raw)
        if not token.contains_marker or token.canonical is None:
            return None
        if level == IgnoreLevel.REQUIRE_TOKEN:
            return raw
        if level == IgnoreLevel.REJECT_SUFFIX:
            return None if token.has_trailing_suffix else raw
        if not token.is_standard:
            return None
        if level == IgnoreLevel.STANDARD_PREFIXED:
            return f"{MARKER}{token.canonical}"
        return token.canonical

    return raw


def canonical_chrom_key(raw: str) -> str | None:
    """
    Canonical chromosome for variant keys: strip a leading chr/CHR, map MT to M.

    Unlike :func:`normalize_chrom`, bare names ("10", "X") are accepted.
    Returns None outside the standard human set.
    """
    c = raw.strip()
    for prefix in ("chr", "CHR"):
        if c.startswith(prefix):
            c = c[len(prefix):]
    if c in ("Mt", "MT", "mt"):
        c = "M"
    if c in _TOKEN_LETTERS:
        return c
    if c.isascii() and c.isdigit():
        c = c.lstrip("0")
        if c in STANDARD_CHROMOSOMES:
            return c
    return None
