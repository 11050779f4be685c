"""Parsing of the optional leading SRC:TL language token."""

from __future__ import annotations

import string
from typing import List, Optional, Sequence, Tuple

_LANG_CHARS = frozenset(string.ascii_letters + string.digits + "-")
_MAX_TOKEN_LEN = 32


def looks_like_lang_token(token: str) -> bool:
    """Report whether ``token`` is a plausible language code."""
    return 0 < len(token) <= _MAX_TOKEN_LEN and all(ch in _LANG_CHARS for ch in token)


def parse_lang_pair_token(token: str) -> Optional[Tuple[str, List[str]]]:
    """Parse SRC:TL or :TL (TL may be TL1+TL2+…); None when it is ordinary text."""
    left, sep, right = token.strip().partition(":")
    if not sep:
        return None
    left, right = left.strip(), right.strip()
    if not right:
        return None
    targets = [part.strip() for part in right.split("+")]
    if not all(looks_like_lang_token(t) for t in targets):
        return None
    if not left:
        return "auto", targets
    if not looks_like_lang_token(left) and left != "auto":
        return None
    return left, targets


def strip_leading_lang_spec(
    args: Sequence[str], source_changed: bool, target_changed: bool
) -> Tuple[List[str], str, List[str], bool]:
    """Drop a leading language token when neither -s nor -t was given.

    Returns the remaining arguments, the source, the targets and whether a
    token was stripped.
    """
    args = list(args)
    if not args or source_changed or target_changed:
        return args, "", [], False
    parsed = parse_lang_pair_token(args[0])
    if parsed is None:
        return args, "", [], False
    source, targets = parsed
    return args[1:], source, targets, True