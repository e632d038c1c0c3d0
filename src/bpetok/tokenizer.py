"""
Byte-level BPE tokenizer for the GPT-2, RoBERTa and CLIP families.
"""

from dataclasses import dataclass
import logging
import sys
from typing import TYPE_CHECKING

import regex as re

from ._bytes import bytes_to_unicode, encode_bytes
from .cache import LRUCache
from .config import END_OF_WORD, ModelConfig, ModelFamily
from .pattern import TokenPattern, compile_pattern
from .scanner import Scanner
from .strategy import AllowAllStrategy, SpecialTokenStrategy
from .types import OffsetMapping, Symbol, SymbolList, Token
from .vocab import NOT_SPECIAL, Vocabulary

if TYPE_CHECKING:
    from .batch import BatchEncoding

log = logging.getLogger(__name__)


@dataclass
class TokenizeResult:
    """Token ids of one input and, when requested, their character spans."""

    ids: list[Token]
    offsets: OffsetMapping | None = None

    def __len__(self) -> int:
        return len(self.ids)


# =========================================================================================

# text pre-processing


def clean_text(text: str) -> str:
    """
    Collapse whitespace the way CLIP expects.

    Every run of Unicode whitespace becomes one space, one leading and one
    trailing whitespace character are stripped and stray ``\\n``/``\\r``
    characters are removed.
    """
    out: list[str] = []
    last_was_space = False
    for ch in text:
        if ch.isspace():
            if not last_was_space:
                out.append(" ")
            last_was_space = True
        else:
            out.append(ch)
            last_was_space = False

    start = 1 if out and out[0].isspace() else 0
    end = len(out) - 1 if len(out) > start and out[-1].isspace() else len(out)
    return "".join(ch for ch in out[start:end] if ch not in "\r\n")


def lowercase(text: str) -> str:
    """Lowercase code point by code point, keeping characters whose lowercase form expands."""
    out = []
    for ch in text:
        low = ch.lower()
        out.append(low if len(low) == 1 else ch)
    return "".join(out)


def is_all_space(text: str) -> bool:
    """True for empty text or text made only of Unicode whitespace."""
    return all(ch.isspace() for ch in text)


# =========================================================================================


class BpeTokenizer:
    """
    Turn text into token ids with a loaded :class:`Vocabulary`.

    Family specific behaviour (BOS/EOS wrapping, CLIP whitespace cleanup,
    lowercasing and word-end markers) is driven by ``config``.
    """

    def __init__(
        self,
        vocab: Vocabulary,
        config: ModelConfig,
        pattern: str | None = None,
    ) -> None:
        self.vocab = vocab
        self.config = config
        self.pat: str = pattern or TokenPattern.GPT2.value
        self.compiled_pat: re.Pattern = compile_pattern(self.pat)

        self.unk_id: Token = vocab.unk_id
        self.bos_id: Token = self._special_id(config.bos_token)
        self.eos_id: Token = self._special_id(config.eos_token)
        self.pad_id: Token = self._special_id(config.pad_token)

        self._default_strategy: SpecialTokenStrategy = AllowAllStrategy()
        # call-scoped caches by default, one locked cache when shared
        self._shared_cache: LRUCache | None = (
            LRUCache(config.cache_capacity, thread_safe=True)
            if config.shared_cache
            else None
        )
        log.debug(
            f"{config.family.value} tokenizer ready: vocab size {vocab.vocab_size()}, "
            f"bos={self.bos_id} eos={self.eos_id} pad={self.pad_id}"
        )

    def _special_id(self, token: str | None) -> Token:
        if token is None:
            return self.unk_id
        return self.vocab.get_token_id(token)

    @property
    def family(self) -> ModelFamily:
        return self.config.family

    def vocab_size(self) -> int:
        """Return the size of the id space (largest id plus one)."""
        return self.vocab.vocab_size()

    def new_cache(self) -> LRUCache:
        """Return a fresh cache sized for this tokenizer."""
        return LRUCache(self.config.cache_capacity)

    def tokenize(
        self,
        text: str,
        max_length: int | None = None,
        offsets: bool = False,
        strategy: SpecialTokenStrategy | None = None,
        cache: LRUCache | None = None,
    ) -> TokenizeResult:
        """
        Tokenize a single text.

        Tokenization stops as soon as ``max_length`` ids have been produced
        (BOS included); families that wrap their output still append EOS
        afterwards, so the result can be one id longer than ``max_length``.

        :param text: Text to tokenize.
        :param max_length: Budget for emitted ids, unbounded when ``None``.
        :param offsets: Also compute a ``(start, end)`` character span per id.
            Spans refer to the text after family pre-processing; BOS and EOS
            get ``(0, 0)``.
        :param strategy: Which configured special tokens to match, all by default.
        :param cache: Merge cache to use, a fresh one per call by default.
        :returns: Token ids and optional offsets.
        :raises SpecialTokenError: If ``strategy`` rejects the text.
        """
        conf = self.config
        limit = sys.maxsize if max_length is None else max_length
        if cache is None:
            cache = self._shared_cache
        if cache is None:
            cache = self.new_cache()

        ids: list[Token] = []
        spans: OffsetMapping | None = [] if offsets else None

        if conf.cleans_spaces:
            text = clean_text(text)
        # wrapped families emit only BOS/EOS for blank input
        if conf.adds_bos_eos and is_all_space(text):
            return TokenizeResult(
                [self.bos_id, self.eos_id],
                [(0, 0), (0, 0)] if offsets else None,
            )
        if conf.cleans_spaces:
            text = lowercase(text)

        if conf.adds_bos_eos:
            self._emit(ids, spans, self.bos_id, (0, 0))

        special_toks = (strategy or self._default_strategy).select(
            text, self.vocab.special_toks
        )
        position = 0
        for segment, special_id in self.vocab.split_by_special_tokens(text, special_toks):
            if len(ids) >= limit:
                break
            if special_id != NOT_SPECIAL:
                self._emit(ids, spans, special_id, (position, position + len(segment)))
            else:
                self._encode_segment(segment, position, limit, cache, ids, spans)
            position += len(segment)

        if conf.adds_bos_eos:
            self._emit(ids, spans, self.eos_id, (0, 0))

        return TokenizeResult(ids, spans)

    def encode(self, text: str, max_length: int | None = None) -> list[Token]:
        """Tokenize ``text`` and return just the ids."""
        return self.tokenize(text, max_length=max_length).ids

    def encode_batch(
        self,
        texts: list[str],
        padding_length: int | None = None,
        attention_mask: bool = True,
        offsets: bool = False,
        strategy: SpecialTokenStrategy | None = None,
    ) -> "BatchEncoding":
        """Tokenize and pad a batch, see :func:`bpetok.batch.encode_batch`."""
        from .batch import encode_batch

        return encode_batch(
            self,
            texts,
            padding_length=padding_length,
            attention_mask=attention_mask,
            offsets=offsets,
            strategy=strategy,
        )

    def decode(self, ids: list[Token], skip_special_tokens: bool = False) -> str:
        """
        Decode ids back into text.

        :raises VocabularyError: If any id is unknown.
        """
        return self.vocab.decode(
            ids,
            skip_special_tokens=skip_special_tokens,
            end_of_word=END_OF_WORD if self.config.cleans_spaces else None,
        )

    @staticmethod
    def _emit(
        ids: list[Token], spans: OffsetMapping | None, tok: Token, span: tuple[int, int]
    ) -> None:
        ids.append(tok)
        if spans is not None:
            spans.append(span)

    def _encode_segment(
        self,
        segment: str,
        start: int,
        limit: int,
        cache: LRUCache,
        ids: list[Token],
        spans: OffsetMapping | None,
    ) -> None:
        """Scan one plain-text segment and emit the merged symbols of each chunk."""
        offset = start
        for chunk in Scanner(segment, self.compiled_pat):
            if len(ids) >= limit:
                break

            # the leading space is counted in the offset, not in the first token span
            space_dif = 0
            if chunk and chunk[0] == " ":
                offset += 1
                if not self.config.cleans_spaces:
                    space_dif = -1

            for idx, (tok, length) in enumerate(self._bpe_chunk(chunk, cache)):
                if len(ids) >= limit:
                    break
                if idx == 0:
                    length += space_dif
                self._emit(ids, spans, tok, (offset, offset + length))
                offset += length

    def _bpe_chunk(self, chunk: str, cache: LRUCache) -> SymbolList:
        """Return the merged symbols of ``chunk``, served from ``cache`` when possible."""
        cached = cache.lookup(chunk)
        if cached is not None:
            return cached

        symbols = self._base_symbols(chunk)
        if not symbols:
            merged: SymbolList = []
        elif self.config.ignore_merges and (whole := self._whole_chunk(chunk)) is not None:
            merged = [whole]
        else:
            merged = self.vocab.bpe(symbols)

        cache.add(chunk, merged)
        return merged

    def _word(self, chunk: str) -> str:
        return chunk.replace(" ", "") if self.config.cleans_spaces else chunk

    def _base_symbols(self, chunk: str) -> SymbolList:
        """
        Expand ``chunk`` into one symbol per UTF-8 byte.

        Each character's first byte carries a source length of one and its
        continuation bytes carry zero, so merged symbols sum to character
        counts. CLIP drops spaces and replaces the last symbol with its
        ``</w>`` word-end form.
        """
        encoder = self.vocab.byte_encoder
        raw: list[int] = []
        lengths: list[int] = []
        for ch in self._word(chunk):
            encoded = ch.encode("utf-8", errors="surrogatepass")
            raw.extend(encoded)
            lengths.extend([1] + [0] * (len(encoded) - 1))

        symbols: list[Symbol] = [(encoder[b], n) for b, n in zip(raw, lengths)]
        if self.config.cleans_spaces and symbols:
            boundary = bytes_to_unicode()[raw[-1]] + END_OF_WORD
            symbols[-1] = (self.vocab.get_token_id(boundary), lengths[-1])
        return symbols

    def _whole_chunk(self, chunk: str) -> Symbol | None:
        """Return the chunk as a single vocab symbol if its byte-encoded form is an entry."""
        word = self._word(chunk)
        encoded = encode_bytes(word)
        if self.config.cleans_spaces:
            encoded += END_OF_WORD
        if encoded in self.vocab:
            return (self.vocab.get_token_id(encoded), len(word))
        return None
