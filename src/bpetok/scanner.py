"""Forward-only chunk scanner over one text segment."""

from collections.abc import Iterator

import regex as re

from .pattern import TokenPattern, compile_pattern


_DEFAULT_PATTERN: re.Pattern = compile_pattern(TokenPattern.GPT2.value)


class Scanner:
    """
    Lazily yield the pre-BPE chunks of a text segment.

    Chunks come out in text order. The scanner is single pass: once
    exhausted (or partially consumed) it cannot be rewound, build a new one
    over the same segment instead.
    """

    def __init__(self, segment: str, pattern: re.Pattern | None = None) -> None:
        self.segment = segment
        self._matches: Iterator[re.Match] = (pattern or _DEFAULT_PATTERN).finditer(
            segment
        )

    def __iter__(self) -> "Scanner":
        return self

    def __next__(self) -> str:
        for m in self._matches:
            chunk = m.group(0)
            # zero-width matches carry no text
            if chunk:
                return chunk
        raise StopIteration
