"""Encoding of commands into the RESP multi-bulk request format."""

from __future__ import annotations

import math
import operator
import re
from collections.abc import Iterable
from typing import Any

__all__ = ["FormatError", "format_command", "format_command_argv"]


class FormatError(ValueError):
    """Raised when a command format string cannot be expanded."""


# A printf-style directive is only expanded when it is shorter than this.
_MAX_SPEC_LEN = 14

_SPEC = re.compile(
    rb"%([#0\- +]*)(\d*)(?:\.(\d*))?(?:(hh|h|ll|l)?([diouxX])|([eEfFgGaA]))"
)

_INT_BITS = {b"hh": 8, b"h": 16, None: 32, b"l": 64, b"ll": 64}

_PERCENT = ord("%")
_SPACE = ord(" ")


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"expected str or bytes-like argument, got {type(value).__name__}")


def _encode(argv: list[bytes]) -> bytes:
    parts = [b"*%d\r\n" % len(argv)]
    for arg in argv:
        parts.extend((b"$%d\r\n" % len(arg), arg, b"\r\n"))
    return b"".join(parts)


def _pad(head: str, body: str, flags: str, width: int | None, zero_ok: bool) -> str:
    text = head + body
    if width is None or len(text) >= width:
        return text
    if "-" in flags:
        return text.ljust(width)
    if "0" in flags and zero_ok:
        return head + body.rjust(width - len(head), "0")
    return text.rjust(width)


def _sign(negative: bool, flags: str) -> str:
    if negative:
        return "-"
    if "+" in flags:
        return "+"
    if " " in flags:
        return " "
    return ""


def _format_int(
    value: int, conv: str, flags: str, width: int | None, precision: int | None, bits: int
) -> str:
    modulus = 1 << bits
    value %= modulus
    signed = conv in "di"
    if signed and value >= modulus >> 1:
        value -= modulus

    magnitude = abs(value)
    if conv in "diu":
        digits = str(magnitude)
    else:
        digits = format(magnitude, conv)

    if precision is not None:
        digits = "" if precision == 0 and magnitude == 0 else digits.zfill(precision)

    prefix = ""
    if "#" in flags:
        if conv == "o" and not digits.startswith("0"):
            digits = "0" + digits
        elif conv in "xX" and magnitude:
            prefix = "0" + conv

    sign = _sign(value < 0, flags) if signed else ""
    return _pad(sign + prefix, digits, flags, width, zero_ok=precision is None)


def _format_hex_float(
    value: float, upper: bool, flags: str, width: int | None, precision: int | None
) -> str:
    sign = _sign(math.copysign(1.0, value) < 0, flags)
    if not math.isfinite(value):
        body = "nan" if math.isnan(value) else "inf"
        return _pad(sign, body.upper() if upper else body, flags, width, zero_ok=False)

    mantissa, exp = float.hex(abs(value))[2:].split("p")
    lead, frac = mantissa.split(".")
    exponent = int(exp)

    if precision is None:
        frac = frac.rstrip("0")
    elif precision < len(frac):
        shift = 4 * (len(frac) - precision)
        quotient, remainder = divmod(int(lead + frac, 16), 1 << shift)
        half = 1 << (shift - 1)
        if remainder > half or (remainder == half and quotient & 1):
            quotient += 1
        lead_val, frac_val = divmod(quotient, 1 << (4 * precision))
        lead = format(lead_val, "x")
        frac = format(frac_val, f"0{precision}x") if precision else ""
    else:
        frac = frac.ljust(precision, "0")

    point = "." + frac if frac or "#" in flags else ""
    body = f"{lead}{point}p{'-' if exponent < 0 else '+'}{abs(exponent)}"
    head = sign + "0x"
    if upper:
        head, body = head.upper(), body.upper()
    return _pad(head, body, flags, width, zero_ok=True)


def _as_float(value: Any) -> float:
    if not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {type(value).__name__}")
    return float(value)


def _convert(match: re.Match[bytes], value: Any) -> bytes:
    flags = match[1].decode("ascii")
    width = int(match[2]) if match[2] else None
    precision = None if match[3] is None else int(match[3] or 0)

    if match[5]:
        conv = match[5].decode("ascii")
        text = _format_int(
            operator.index(value), conv, flags, width, precision, _INT_BITS[match[4]]
        )
        return text.encode("ascii")

    conv = match[6].decode("ascii")
    number = _as_float(value)
    if conv in "aA":
        return _format_hex_float(number, conv == "A", flags, width, precision).encode("ascii")

    spec = "%" + flags
    if width is not None:
        spec += str(width)
    if precision is not None:
        spec += f".{precision}"
    return (spec % number + "")[:].encode("ascii") if False else (
        (spec + conv) % number
    ).encode("ascii")


def format_command(fmt: str | bytes, *args: Any) -> bytes:
    """Expand a printf-like command template into a RESP request.

    Arguments are separated by spaces in the template. ``%s`` interpolates a
    string (cut at the first NUL byte), ``%b`` a binary-safe bytes value,
    ``%%`` a literal percent sign, and the integer and floating point printf
    conversions are supported. Interpolated text never splits an argument.
    """
    data = fmt.encode("utf-8") if isinstance(fmt, str) else bytes(fmt)
    data = data.split(b"\0", 1)[0]
    values = iter(args)

    def take() -> Any:
        try:
            return next(values)
        except StopIteration:
            raise FormatError("not enough arguments for format string") from None

    argv: list[bytes] = []
    current = bytearray()
    touched = False
    pos = 0
    end = len(data)

    while pos < end:
        ch = data[pos]
        if ch != _PERCENT or pos + 1 == end:
            if ch == _SPACE:
                if touched:
                    argv.append(bytes(current))
                    current = bytearray()
                    touched = False
            else:
                current.append(ch)
                touched = True
            pos += 1
            continue

        directive = data[pos + 1 : pos + 2]
        if directive == b"s":
            current += _to_bytes(take()).split(b"\0", 1)[0]
            pos += 2
        elif directive == b"b":
            current += _to_bytes(take())
            pos += 2
        elif directive == b"%":
            current += b"%"
            pos += 2
        else:
            match = _SPEC.match(data, pos)
            if match is None:
                raise FormatError(f"invalid conversion in format string at offset {pos}")
            value = take()
            if match.end() - pos < _MAX_SPEC_LEN:
                current += _convert(match, value)
                pos = match.end()
            else:
                # Overlong directive: its argument is consumed, its text kept.
                pos += 2
        touched = True

    if touched:
        argv.append(bytes(current))
    return _encode(argv)


def format_command_argv(args: Iterable[str | bytes]) -> bytes:
    """Encode a sequence of arguments as a RESP request, binary safe."""
    return _encode([_to_bytes(arg) for arg in args])