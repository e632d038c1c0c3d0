"""Factory functions for creating tokenizers."""

from collections.abc import Iterable
from dataclasses import dataclass
import logging
from pathlib import Path

from .config import FamilyName, ModelFamily, get_config
from .errors import BpeTokError, ConfigError, InternalInvariantError
from .tokenizer import BpeTokenizer
from .vocab import Vocabulary

log = logging.getLogger(__name__)

VOCAB_FILENAME = "vocab.json"
MERGES_FILENAME = "merges.txt"


def get_tokenizer(
    family: FamilyName | str | ModelFamily,
    vocab: str,
    merges: str,
    *,
    special_tokens: Iterable[str] = (),
    pattern: str | None = None,
    **overrides,
) -> BpeTokenizer:
    """
    Build a tokenizer for ``family`` from vocab and merges text.

    :param family: "gpt2", "roberta" or "clip".
    :param vocab: JSON object mapping tokens to ids.
    :param merges: Merge rules, one ``left right`` pair per line in priority order.
    :param special_tokens: Extra special tokens on top of the family's unk/bos/eos/pad.
    :param pattern: Custom chunk split pattern, the GPT-2 pattern by default.
    :param overrides: ``ModelConfig`` fields, e.g. ``padding_length=16``.
    :return: Ready to use tokenizer.
    :raises ConfigError: If the family, vocab, merges or options are invalid.
    :raises PatternError: If ``pattern`` does not compile.

    .. code-block:: python

        tokenizer = get_tokenizer("roberta", vocab_json, merges_txt, padding_length=64)
        ids = tokenizer.encode("Hello world")
    """
    conf = get_config(family, **overrides)
    specials = conf.special_tokens()
    specials += [seq for seq in special_tokens if seq not in specials]
    voc = Vocabulary.load(vocab, merges, conf.unk_token, specials[1:])
    return BpeTokenizer(voc, conf, pattern=pattern)


def _read_text(path: Path, field: str) -> str:
    if not path.is_file():
        raise ConfigError(f"file does not exist: {path}", field=field)
    return path.read_text(encoding="utf-8")


def from_files(
    vocab_path: str | Path,
    merges_path: str | Path,
    family: FamilyName | str | ModelFamily,
    **kwargs,
) -> BpeTokenizer:
    """
    Build a tokenizer from a ``vocab.json`` and a ``merges.txt`` on disk.

    Keyword arguments are forwarded to :func:`get_tokenizer`.

    :raises ConfigError: If a file is missing or its content is invalid.
    """
    vocab_path, merges_path = Path(vocab_path), Path(merges_path)
    log.info(f"loading tokenizer files {vocab_path} and {merges_path}")
    return get_tokenizer(
        family,
        _read_text(vocab_path, "vocab"),
        _read_text(merges_path, "merges"),
        **kwargs,
    )


def from_pretrained(
    directory: str | Path, family: FamilyName | str | ModelFamily, **kwargs
) -> BpeTokenizer:
    """Build a tokenizer from ``directory/vocab.json`` and ``directory/merges.txt``."""
    directory = Path(directory)
    return from_files(
        directory / VOCAB_FILENAME, directory / MERGES_FILENAME, family, **kwargs
    )


@dataclass
class LoadResult:
    """Outcome of :func:`try_load`; check :attr:`ok` before using :attr:`tokenizer`."""

    tokenizer: BpeTokenizer | None = None
    error: BpeTokError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> BpeTokenizer:
        """Return the tokenizer or raise the construction error."""
        if self.error is not None:
            raise self.error
        if self.tokenizer is None:
            raise InternalInvariantError(
                "load result holds neither tokenizer nor error"
            )
        return self.tokenizer


def try_load(
    family: FamilyName | str | ModelFamily, vocab: str, merges: str, **kwargs
) -> LoadResult:
    """Like :func:`get_tokenizer` but report construction failures in the result."""
    try:
        return LoadResult(tokenizer=get_tokenizer(family, vocab, merges, **kwargs))
    except BpeTokError as e:
        log.warning(f"tokenizer construction failed: {e}")
        return LoadResult(error=e)
