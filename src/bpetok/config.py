"""Per-family tokenizer configuration."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Final, Literal

from .cache import DEFAULT_CAPACITY
from .errors import ConfigError


FamilyName = Literal["gpt2", "roberta", "clip"]

# CLIP marks the last symbol of every word with this suffix
END_OF_WORD: Final[str] = "</w>"


class ModelFamily(str, Enum):
    """Byte-level BPE tokenizer families with distinct pre/post-processing."""

    GPT2 = "GPT2"
    ROBERTA = "Roberta"
    CLIP = "CLIP"

    @classmethod
    def get(cls, name: "str | ModelFamily") -> "ModelFamily":
        """Get family by name (case-insensitive)."""
        if isinstance(name, ModelFamily):
            return name
        if not isinstance(name, str):
            raise ConfigError(
                f"model family must be a name, got {type(name).__name__}",
                field="family",
            )
        try:
            return cls[name.upper()]
        except KeyError:
            raise ConfigError(
                f"unknown model family: {name!r}. "
                f"Valid families: {', '.join(fam.value for fam in cls)}",
                field="family",
            )


@dataclass(frozen=True)
class ModelConfig:
    """
    Constants and options for one tokenizer family.

    ``padding_length`` of ``-1`` pads every batch to its longest sequence,
    any positive value pads (and truncates) to that fixed width.
    """

    family: ModelFamily
    unk_token: str
    bos_token: str | None = None
    eos_token: str | None = None
    pad_token: str | None = None
    padding_length: int = -1
    cache_capacity: int = DEFAULT_CAPACITY
    # keep one lock-guarded cache for the tokenizer lifetime instead of one per call
    shared_cache: bool = False
    # emit a chunk as one id when its byte-encoded form is already a vocab entry
    ignore_merges: bool = False

    def __post_init__(self) -> None:
        if not self.unk_token:
            raise ConfigError("unk_token is required", field="unk_token")
        if self.padding_length != -1 and self.padding_length <= 0:
            raise ConfigError(
                "padding_length should be more than 0 or equal -1",
                field="padding_length",
            )
        if self.cache_capacity <= 0:
            raise ConfigError(
                "cache_capacity should be more than 0", field="cache_capacity"
            )

    @property
    def adds_bos_eos(self) -> bool:
        """Roberta and CLIP wrap every input in BOS/EOS."""
        return self.family is not ModelFamily.GPT2

    @property
    def cleans_spaces(self) -> bool:
        """CLIP collapses whitespace, lowercases and marks word ends."""
        return self.family is ModelFamily.CLIP

    def special_tokens(self) -> list[str]:
        """Return unk, bos, eos and pad tokens without duplicates, in that order."""
        seen: list[str] = []
        for tok in (self.unk_token, self.bos_token, self.eos_token, self.pad_token):
            if tok is not None and tok not in seen:
                seen.append(tok)
        return seen

    def with_options(self, **overrides) -> "ModelConfig":
        """Return a copy with the given fields replaced (validation re-runs)."""
        return replace(self, **overrides)


GPT2_CONFIG: Final = ModelConfig(
    family=ModelFamily.GPT2,
    unk_token="<|endoftext|>",
    bos_token="<|endoftext|>",
    eos_token="<|endoftext|>",
    pad_token="<|endoftext|>",
)

ROBERTA_CONFIG: Final = ModelConfig(
    family=ModelFamily.ROBERTA,
    unk_token="<unk>",
    bos_token="<s>",
    eos_token="</s>",
    pad_token="<pad>",
)

CLIP_CONFIG: Final = ModelConfig(
    family=ModelFamily.CLIP,
    unk_token="<|endoftext|>",
    bos_token="<|startoftext|>",
    eos_token="<|endoftext|>",
    pad_token="<|endoftext|>",
)

_FAMILY_CONFIGS: Final[dict[ModelFamily, ModelConfig]] = {
    ModelFamily.GPT2: GPT2_CONFIG,
    ModelFamily.ROBERTA: ROBERTA_CONFIG,
    ModelFamily.CLIP: CLIP_CONFIG,
}


def list_families() -> list[str]:
    """Return supported model family names."""
    return [fam.value for fam in ModelFamily]


def get_config(family: "FamilyName | str | ModelFamily", **overrides) -> ModelConfig:
    """
    Return the preset configuration for ``family``, optionally with overrides.

    :param family: Family name, e.g. "gpt2", "roberta" or "clip".
    :param overrides: ``ModelConfig`` fields to replace, e.g. ``padding_length=16``.
    :raises ConfigError: If the family is unknown or an override is invalid.
    """
    conf = _FAMILY_CONFIGS[ModelFamily.get(family)]
    if not overrides:
        return conf
    try:
        return conf.with_options(**overrides)
    except TypeError as e:
        raise ConfigError(f"invalid configuration override: {e}") from e
