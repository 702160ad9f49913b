"""Stable identity for an alert across polls — 64-bit FNV-1 over URL and labels."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

_FNV64_OFFSET = 0xCBF29CE484222325
_FNV64_PRIME = 0x100000001B3
_MASK64 = 0xFFFFFFFFFFFFFFFF


def _fnv1_64(chunks: Iterable[bytes], value: int = _FNV64_OFFSET) -> int:
    for chunk in chunks:
        for byte in chunk:
            value = (value * _FNV64_PRIME) & _MASK64
            value ^= byte
    return value


def label_tokens(labels: Mapping[str, str]) -> list[str]:
    """Render labels as sorted ``,key=value`` tokens."""
    return sorted(f",{key}={value}" for key, value in labels.items())


def fingerprint(generator_url: str, labels: Mapping[str, str]) -> int:
    """Return the 64-bit identity of an alert.

    The generator URL is hashed first, then each label token in sorted
    order, so two label mappings holding the same pairs always hash alike
    whatever their insertion order.
    """
    chunks = [generator_url.encode("utf-8")]
    chunks.extend(token.encode("utf-8") for token in label_tokens(labels))
    return _fnv1_64(chunks)
