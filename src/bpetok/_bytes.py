"""
Byte to printable-character remap used as the byte-level BPE alphabet.
"""

import functools


@functools.cache
def bytes_to_unicode() -> dict[int, str]:
    """
    Return the fixed mapping from raw byte values to printable code points.

    Printable latin-1 bytes map to themselves; every other byte is shifted
    above U+00FF so no byte ends up as whitespace or a control character.
    """
    bs = (
        list(range(ord("!"), ord("~") + 1))
        + list(range(ord("¡"), ord("¬") + 1))
        + list(range(ord("®"), ord("ÿ") + 1))
    )
    cs = bs[:]
    n = 0
    for b in range(256):
        if b not in bs:
            bs.append(b)
            cs.append(256 + n)
            n += 1
    return dict(zip(bs, (chr(c) for c in cs)))


@functools.cache
def unicode_to_bytes() -> dict[str, int]:
    """Return the inverse of :func:`bytes_to_unicode`."""
    return {c: b for b, c in bytes_to_unicode().items()}


def encode_bytes(text: str) -> str:
    """Map the UTF-8 bytes of ``text`` onto their placeholder characters."""
    table = bytes_to_unicode()
    return "".join(table[b] for b in text.encode("utf-8", errors="surrogatepass"))
