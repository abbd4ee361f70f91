"""
String literal decoding and data escaping.

Source strings are decoded to bytes once, when STRING/CHR (or a bare
string literal) is evaluated; the emitter re-escapes those bytes for the
data section.

Supported escapes
-----------------
| Escape     | Meaning                                  |
|------------|------------------------------------------|
| \\HH        | byte with hex value HH (target style)    |
| \\xHH       | byte with hex value HH                   |
| \\uHHHH     | code point, UTF-8 encoded                |
| \\u{H...}   | code point, UTF-8 encoded                |
| \\n \\t \\r   | newline, tab, carriage return            |
| \\b \\f      | backspace, form feed (no hex digit after)|
| \\0         | NUL (when not followed by a hex digit)   |
| \\\\ \\" \\' \\/ | the character itself                    |

Two hex digits take precedence over the single-letter escapes, so "\\be"
is the byte 0xBE, matching the target format's own string syntax. A
UTF-16 surrogate pair written as two \\uHHHH escapes is one code point.
"""

from typing import Optional

from wamp.errors import SourceLocation, WampSyntaxError


ESCAPE_SEQUENCES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "/": "/",
}

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

# Bytes written as-is inside a data string (printable ASCII minus " and \)
_PLAIN_BYTES = frozenset(range(0x20, 0x7F)) - {ord('"'), ord("\\")}

_DATA_ESCAPES = {
    ord("\n"): "\\n",
    ord("\t"): "\\t",
    ord("\r"): "\\r",
    ord('"'): '\\"',
    ord("\\"): "\\\\",
}


def _is_hex(text: str) -> bool:
    return bool(text) and all(c in HEX_DIGITS for c in text)


def decode_string(raw: str, location: Optional[SourceLocation] = None) -> bytes:
    """
    Decode a raw quoted string token into bytes.

    Args:
        raw: Token text including the surrounding quotes
        location: Token position, for error messages

    Raises:
        WampSyntaxError: If the literal is unterminated or has a bad escape
    """
    if not raw or raw[0] not in "\"'":
        raise WampSyntaxError(f"not a string literal: {raw!r}", location)
    quote = raw[0]
    out = bytearray()
    i = 1
    while i < len(raw):
        char = raw[i]
        if char == quote:
            if i != len(raw) - 1:
                raise WampSyntaxError(
                    f"unexpected text after string literal: {raw[i + 1:]!r}",
                    location,
                )
            return bytes(out)
        if char != "\\":
            out.extend(char.encode("utf-8"))
            i += 1
            continue

        rest = raw[i + 1:]
        if _is_hex(rest[:2]) and len(rest) >= 2:
            out.append(int(rest[:2], 16))
            i += 3
        elif rest.startswith("x") and _is_hex(rest[1:3]) and len(rest) >= 3:
            out.append(int(rest[1:3], 16))
            i += 4
        elif rest.startswith("u{"):
            end = rest.find("}")
            digits = rest[2:end] if end != -1 else ""
            if not _is_hex(digits):
                raise WampSyntaxError(f"invalid unicode escape in {raw}", location)
            out.extend(_encode_code_point(int(digits, 16), raw, location))
            i += end + 2
        elif rest.startswith("u") and _is_hex(rest[1:5]) and len(rest) >= 5:
            code = int(rest[1:5], 16)
            i += 6
            low = _low_surrogate(rest[5:11]) if 0xD800 <= code <= 0xDBFF else None
            if low is not None:
                code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                i += 6
            out.extend(_encode_code_point(code, raw, location))
        elif rest[:1] in ESCAPE_SEQUENCES:
            out.extend(ESCAPE_SEQUENCES[rest[0]].encode("utf-8"))
            i += 2
        elif not rest:
            break
        else:
            raise WampSyntaxError(
                f"invalid escape sequence '\\{rest[0]}' in {raw}",
                location,
            )

    raise WampSyntaxError(
        f"unterminated string literal {raw}",
        location,
        hint=f"add the closing {quote}",
    )


def _low_surrogate(text: str) -> Optional[int]:
    """Return the value of a leading \\uDC00-\\uDFFF escape in text, if any."""
    if len(text) < 6 or not text.startswith("\\u") or not _is_hex(text[2:6]):
        return None
    code = int(text[2:6], 16)
    return code if 0xDC00 <= code <= 0xDFFF else None


def _encode_code_point(
    code: int, raw: str, location: Optional[SourceLocation]
) -> bytes:
    try:
        return chr(code).encode("utf-8")
    except (ValueError, UnicodeEncodeError):
        raise WampSyntaxError(
            f"invalid code point U+{code:X} in {raw}", location
        ) from None


def decode_char(data: bytes) -> Optional[int]:
    """
    Return the single character code held in data, or None.

    Valid UTF-8 is read as text; a lone byte that is not valid UTF-8
    (e.g. "\\ff") stands for itself.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return data[0] if len(data) == 1 else None
    if len(text) != 1:
        return None
    return ord(text)


def escape_data(data: bytes) -> str:
    """Escape bytes for use inside a target-format data string."""
    parts = []
    for byte in data:
        if byte in _PLAIN_BYTES:
            parts.append(chr(byte))
        elif byte in _DATA_ESCAPES:
            parts.append(_DATA_ESCAPES[byte])
        else:
            parts.append(f"\\{byte:02x}")
    return "".join(parts)
