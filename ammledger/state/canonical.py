"""
Byte-level encoding used by the state root.

Every value is length-prefixed or self-delimiting, so concatenated fields
decode unambiguously.
"""

from __future__ import annotations

import hashlib


DOMAIN_PREFIX = b"ammledger:"


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """
    Domain tag `ammledger:<label>:v<version>` followed by a NUL byte.

    Raises:
        TypeError: If label is not a non-empty str
        ValueError: If label is not NUL-free ASCII or version is not positive
    """
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label or not label.isascii():
        raise ValueError(f"label must be NUL-free ASCII: {label!r}")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError(f"version must be a positive int: {version!r}")
    return DOMAIN_PREFIX + f"{label}:v{version}".encode("ascii") + b"\x00"


def encode_uvarint(value: int) -> bytes:
    """Unsigned LEB128: 7 bits per byte, high bit set on all but the last."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"uvarint must be a non-negative int, got {value!r}")
    out = bytearray()
    while value > 0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def encode_bytes(value: bytes) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError("value must be bytes")
    return encode_uvarint(len(value)) + bytes(value)


def encode_str(value: str) -> bytes:
    """
    UTF-8 with a length prefix. Lone surrogates cannot be encoded and are
    rejected.
    """
    if not isinstance(value, str):
        raise TypeError("value must be a str")
    try:
        raw = value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise TypeError("surrogate code points cannot be encoded") from exc
    return encode_bytes(raw)
