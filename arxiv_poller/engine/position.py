"""Encode and decode the resumable offset carried by position tokens."""

from __future__ import annotations


def encode(offset: int) -> str:
    if offset < 0:
        raise ValueError("offset must be >= 0")
    return str(offset)


def decode(token: str | bytes | None) -> int:
    """Return the offset stored in ``token``.

    Empty, missing, negative or otherwise non-numeric tokens mean "start of
    stream" and decode to 0. Surrounding whitespace makes a token non-numeric;
    a single leading ``+`` is allowed.
    """

    if token is None:
        return 0
    if isinstance(token, bytes):
        token = token.decode("ascii", errors="replace")
    digits = token[1:] if token.startswith("+") else token
    if not digits or not (digits.isascii() and digits.isdigit()):
        return 0
    return int(digits)


__all__ = ["decode", "encode"]
