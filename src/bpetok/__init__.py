"""bpetok: byte-level BPE tokenization for GPT-2, RoBERTa and CLIP vocabularies."""

from .batch import BatchEncoding, encode_batch
from .cache import LRUCache
from .config import (
    CLIP_CONFIG,
    GPT2_CONFIG,
    ROBERTA_CONFIG,
    ModelConfig,
    ModelFamily,
    get_config,
    list_families,
)
from .errors import (
    BpeTokError,
    ConfigError,
    InternalInvariantError,
    PatternError,
    SpecialTokenError,
    VocabularyError,
)
from .factory import LoadResult, from_files, from_pretrained, get_tokenizer, try_load
from .pattern import TokenPattern, list_patterns
from .strategy import (
    AllowAllStrategy,
    AllowCustomStrategy,
    AllowNoneRaiseStrategy,
    AllowNoneStrategy,
    SpecialTokenStrategy,
    get_strategy,
    list_strategies,
)
from .tokenizer import BpeTokenizer, TokenizeResult
from .vocab import NOT_SPECIAL, Vocabulary

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("bpetok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "BpeTokenizer",
    "TokenizeResult",
    "Vocabulary",
    "NOT_SPECIAL",
    "LRUCache",
    "BatchEncoding",
    "encode_batch",
    "ModelConfig",
    "ModelFamily",
    "GPT2_CONFIG",
    "ROBERTA_CONFIG",
    "CLIP_CONFIG",
    "TokenPattern",
    "SpecialTokenStrategy",
    "AllowAllStrategy",
    "AllowNoneStrategy",
    "AllowNoneRaiseStrategy",
    "AllowCustomStrategy",
    "LoadResult",
    "BpeTokError",
    "ConfigError",
    "InternalInvariantError",
    "PatternError",
    "SpecialTokenError",
    "VocabularyError",
    "get_tokenizer",
    "get_config",
    "get_strategy",
    "from_files",
    "from_pretrained",
    "try_load",
    "list_families",
    "list_patterns",
    "list_strategies",
]
