"""Policies deciding which configured special tokens the splitter honours."""

from abc import ABC, abstractmethod
from typing import Final, Literal, overload, override
import logging

from .errors import ConfigError, SpecialTokenError
from .types import Token

log = logging.getLogger(__name__)


class SpecialTokenStrategy(ABC):
    """Base policy for special tokens appearing in text to be tokenized."""

    @abstractmethod
    def select(self, text: str, special_toks: dict[str, Token]) -> dict[str, Token]:
        """Return the special tokens that should be matched verbatim in ``text``."""


class AllowAllStrategy(SpecialTokenStrategy):
    """Match every configured special token. This is the tokenizer default."""

    @override
    def select(self, text: str, special_toks: dict[str, Token]) -> dict[str, Token]:
        return special_toks


class AllowNoneStrategy(SpecialTokenStrategy):
    """Treat special token strings as ordinary text and run them through BPE."""

    @override
    def select(self, text: str, special_toks: dict[str, Token]) -> dict[str, Token]:
        if any(seq in text for seq in special_toks):
            log.warning("special tokens found in text, encoding them as plain text")
        return {}


class AllowNoneRaiseStrategy(SpecialTokenStrategy):
    """Refuse text that contains any configured special token."""

    @override
    def select(self, text: str, special_toks: dict[str, Token]) -> dict[str, Token]:
        found = {seq for seq in special_toks if seq in text}
        if found:
            raise SpecialTokenError(
                "special tokens found in text but not allowed", found_tokens=found
            )
        return {}


class AllowCustomStrategy(SpecialTokenStrategy):
    """Match only the special tokens in ``allowed_subset``."""

    def __init__(self, allowed_subset: set[str]) -> None:
        super().__init__()
        self.allowed_subset = allowed_subset

    @override
    def select(self, text: str, special_toks: dict[str, Token]) -> dict[str, Token]:
        return {
            seq: tok for seq, tok in special_toks.items() if seq in self.allowed_subset
        }


StrategyName = Literal["all", "none", "none-raise", "custom"]

_SPECIAL_TOKEN_STRATEGIES: Final[dict[str, type[SpecialTokenStrategy]]] = {
    "all": AllowAllStrategy,
    "none": AllowNoneStrategy,
    "none-raise": AllowNoneRaiseStrategy,
    "custom": AllowCustomStrategy,
}


def list_strategies() -> list[str]:
    """Return available special token strategy names."""
    return list(_SPECIAL_TOKEN_STRATEGIES.keys())


@overload
def get_strategy(
    name: Literal["all", "none", "none-raise"],
) -> SpecialTokenStrategy: ...


@overload
def get_strategy(
    name: Literal["custom"], allowed_subset: set[str]
) -> AllowCustomStrategy: ...


def get_strategy(
    name: StrategyName = "all", allowed_subset: set[str] | None = None
) -> SpecialTokenStrategy:
    """
    Create a special token strategy by name.

    :param name: Strategy identifier, one of "all", "none", "none-raise" or "custom".
    :param allowed_subset: Required for "custom"; tokens matched during tokenization.
    :raises ConfigError: If name is unknown or allowed_subset is missing for custom.
    """
    if name not in _SPECIAL_TOKEN_STRATEGIES:
        raise ConfigError(
            f"unknown strategy name {name!r}, available: {list_strategies()}",
            field="strategy",
        )

    if name == "custom":
        if allowed_subset is None:
            raise ConfigError(
                "allowed_subset is required for custom strategy", field="strategy"
            )
        return AllowCustomStrategy(allowed_subset)

    return _SPECIAL_TOKEN_STRATEGIES[name]()


__all__ = [
    "StrategyName",
    "SpecialTokenStrategy",
    "AllowAllStrategy",
    "AllowNoneStrategy",
    "AllowNoneRaiseStrategy",
    "AllowCustomStrategy",
    "list_strategies",
    "get_strategy",
]
