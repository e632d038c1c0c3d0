"""Custom exception hierarchy for bpetok tokenization errors."""

import regex as re


class BpeTokError(Exception):
    """Base exception for all bpetok errors."""


class ConfigError(BpeTokError):
    """Raised when vocabulary, merges or tokenizer configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        line: int | None = None,
    ) -> None:
        """Initialize with optional field name and line number that get appended to the message."""
        extra = " "
        if field:
            extra += f"(field: {field}) "
        # merges: 1-based line in the merges text
        if line is not None:
            extra += f"(line: {line}) "
        super().__init__(message + extra)
        self.field = field
        self.line = line


class SpecialTokenError(BpeTokError):
    """Raised when special token handling fails."""

    def __init__(self, message: str, *, found_tokens: set[str] | None = None) -> None:
        """Initialize with optional found_tokens that get appended to the message."""
        if found_tokens:
            message = f"{message} (found: {', '.join(sorted(found_tokens))})"
        super().__init__(message)
        self.found_tokens = found_tokens


class PatternError(BpeTokError):
    """Raised when compiling and/or validating regex patterns."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        regex_err: re.error | None = None,
    ) -> None:
        """
        Initialize PatternError with pattern details.

        :param message: Error message.
        :param pattern: The regex pattern that failed.
        :param regex_err: The underlying regex error from the regex library.
        """
        extra = " "
        if pattern:
            extra += f"(pattern: {pattern!r}) "
        if regex_err:
            extra += f"(reason: {regex_err}) "
        super().__init__(message + extra)
        self.pattern = pattern
        self.regex_err = regex_err


class InternalInvariantError(BpeTokError):
    """Raised when an internal precondition is violated, kindly report issue."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        extra = " "
        if key is not None:
            extra += f"(key: {key!r}) "
        super().__init__(message + extra)
        self.key = key


class VocabularyError(BpeTokError):
    """Raised when vocabulary lookups fail."""

    def __init__(
        self,
        message: str,
        *,
        vocab_size: int | None = None,
        invalid_tok: int | None = None,
    ) -> None:
        """Initialize with optional token and vocab_size that get appended to the message."""
        extra = " "
        if vocab_size:
            extra += f"(vocab size: {vocab_size}) "
        # decoding: id not in model vocab
        if invalid_tok is not None:
            extra += f"(invalid token: {invalid_tok}) "
        super().__init__(message + extra)
        self.vocab_size = vocab_size
        self.invalid_tok = invalid_tok
