"""
Vocabulary, merge-rank table and special-token splitting for byte-level BPE.
"""

from collections.abc import Iterable, Mapping
import functools
import json
import logging
from typing import Final

import regex as re

from ._bpe import bpe_merge
from ._bytes import bytes_to_unicode, unicode_to_bytes
from ._decorators import measure_time
from ._sanitise import escape_ctrl_chars
from .errors import ConfigError, VocabularyError
from .types import MergeRanks, SymbolId, SymbolList, Token

log = logging.getLogger(__name__)

# marks a plain-text unit in the output of split_by_special_tokens
NOT_SPECIAL: Final[int] = -1

MERGES_HEADER: Final[str] = "#version"


class Vocabulary:
    """
    Token <-> id table together with the byte alphabet and merge ranks.

    Built once by :meth:`load` and never mutated afterwards, so a single
    instance can be shared by any number of tokenizers and threads.
    """

    def __init__(
        self,
        token_to_id: dict[str, Token],
        merges: MergeRanks,
        unk_token: str,
        special_toks: dict[str, Token],
    ) -> None:
        self._token_to_id = token_to_id
        self._id_to_token: dict[Token, str] = {}
        for tok, idx in token_to_id.items():
            self._id_to_token.setdefault(idx, tok)
        self._merges = merges
        self._size: int = max(token_to_id.values(), default=-1) + 1
        self.unk_token = unk_token
        self.unk_id: Token = token_to_id[unk_token]
        self.special_toks: dict[str, Token] = special_toks
        self._special_ids: frozenset[Token] = frozenset(special_toks.values())
        table = bytes_to_unicode()
        self._byte_encoder: tuple[SymbolId, ...] = tuple(
            token_to_id.get(table[b], self.unk_id) for b in range(256)
        )

    @classmethod
    @measure_time
    def load(
        cls,
        vocab_text: str,
        merges_text: str,
        unk_token: str,
        special_tokens: Iterable[str] = (),
    ) -> "Vocabulary":
        """
        Parse a JSON vocabulary and a merges list into a :class:`Vocabulary`.

        The merges text holds one ``left right`` pair per line in priority
        order; an optional ``#version`` header and blank lines are skipped.
        Special tokens missing from the vocabulary are appended with fresh ids.

        :param vocab_text: JSON object mapping token strings to integer ids.
        :param merges_text: Newline separated merge rules.
        :param unk_token: Token used for anything the vocabulary cannot encode.
        :param special_tokens: Extra tokens matched verbatim, e.g. bos/eos/pad.
        :raises ConfigError: If either text is empty or malformed.
        """
        if not unk_token:
            raise ConfigError("unk_token is required", field="unk_token")
        token_to_id = _parse_vocab(vocab_text)
        merges = _parse_merges(merges_text, token_to_id)

        special_toks: dict[str, Token] = {}
        next_id = max(token_to_id.values(), default=-1) + 1
        for seq in [unk_token, *special_tokens]:
            if not seq or seq in special_toks:
                continue
            if seq not in token_to_id:
                log.debug(f"adding special token {seq!r} with id {next_id}")
                token_to_id[seq] = next_id
                next_id += 1
            special_toks[seq] = token_to_id[seq]

        vocab = cls(token_to_id, merges, unk_token, special_toks)
        log.info(
            f"vocabulary loaded: id space {vocab.vocab_size()}, "
            f"{len(merges)} merge rules, {len(special_toks)} special tokens"
        )
        return vocab

    def vocab_size(self) -> int:
        """
        Return the size of the id space, i.e. the largest id plus one.

        Vocabularies with gaps or shared ids are accepted, so this can exceed
        the number of distinct token strings; every emitted id is below it.
        """
        return self._size

    def get_token_id(self, token: str) -> Token:
        """Return the id of ``token``, or the unk id if it is not in the vocabulary."""
        return self._token_to_id.get(token, self.unk_id)

    def id_to_token(self, idx: Token) -> str | None:
        return self._id_to_token.get(idx)

    def __contains__(self, token: object) -> bool:
        return token in self._token_to_id

    @property
    def byte_encoder(self) -> tuple[SymbolId, ...]:
        """Symbol id of the placeholder character for each of the 256 byte values."""
        return self._byte_encoder

    def merge_rank(self, left: SymbolId, right: SymbolId) -> tuple[int, SymbolId] | None:
        """Return ``(rank, merged_id)`` for a mergeable pair, otherwise ``None``."""
        return self._merges.get((left, right))

    def num_merges(self) -> int:
        return len(self._merges)

    def bpe(self, symbols: SymbolList) -> SymbolList:
        """Run the merge engine over ``symbols`` with this vocabulary's ranks."""
        return bpe_merge(symbols, self.merge_rank)

    def is_special(self, idx: Token) -> bool:
        return idx in self._special_ids

    def split_by_special_tokens(
        self,
        text: str,
        special_toks: Mapping[str, Token] | None = None,
    ) -> list[tuple[str, Token]]:
        """
        Split ``text`` around special tokens.

        At every position the longest matching special token wins; matches
        are case sensitive and never overlap (scan is left to right).

        :param text: Text to split.
        :param special_toks: Tokens to match, defaults to all configured ones.
        :return: ``(segment, id)`` units in text order; ``id`` is
            :data:`NOT_SPECIAL` for plain text. Empty plain segments are dropped.
        """
        if special_toks is None:
            special_toks = self.special_toks
        if not special_toks or not text:
            return [(text, NOT_SPECIAL)] if text else []

        special_pat = _special_split_pattern(tuple(special_toks))
        # capturing group keeps the matched special tokens in the split result
        parts = special_pat.split(text)

        units: list[tuple[str, Token]] = []
        for idx, part in enumerate(parts):
            # odd positions hold the captured delimiters
            if idx % 2 == 1:
                units.append((part, special_toks[part]))
            elif part:
                units.append((part, NOT_SPECIAL))
        return units

    def decode(
        self,
        ids: Iterable[Token],
        skip_special_tokens: bool = False,
        end_of_word: str | None = None,
    ) -> str:
        """
        Decode token ids back into text.

        Byte-level placeholders are mapped back to raw bytes and the result is
        decoded as UTF-8 with invalid sequences replaced.

        :param ids: Token ids to decode.
        :param skip_special_tokens: Drop special tokens instead of rendering them.
        :param end_of_word: Word-end suffix (CLIP's ``</w>``) rendered as a space.
        :raises VocabularyError: If any id is not in the vocabulary.
        """
        inverse = unicode_to_bytes()
        buf = bytearray()
        for idx in ids:
            tok = self._id_to_token.get(idx)
            if tok is None:
                raise VocabularyError(
                    "token not found in vocabulary",
                    vocab_size=self.vocab_size(),
                    invalid_tok=idx,
                )
            if self.is_special(idx):
                if not skip_special_tokens:
                    buf += tok.encode("utf-8")
                continue
            if end_of_word:
                tok = tok.replace(end_of_word, " ")
            for ch in tok:
                if ch in inverse:
                    buf.append(inverse[ch])
                else:
                    buf += ch.encode("utf-8")
        text = buf.decode("utf-8", errors="replace")
        return text.rstrip(" ") if end_of_word else text


@functools.lru_cache(maxsize=32)
def _special_split_pattern(tokens: tuple[str, ...]) -> re.Pattern:
    """Compile an alternation that prefers the longest special token at each position."""
    # escape regex metachars like "|" in "<|endoftext|>"
    ordered = sorted(tokens, key=len, reverse=True)
    return re.compile("(" + "|".join(re.escape(seq) for seq in ordered) + ")")


def _parse_vocab(vocab_text: str) -> dict[str, Token]:
    if not vocab_text or not vocab_text.strip():
        raise ConfigError("vocabulary shouldn't be empty", field="vocab")
    try:
        raw = json.loads(vocab_text)
    except ValueError as e:
        raise ConfigError(f"vocabulary is not valid JSON: {e}", field="vocab") from e
    if not isinstance(raw, dict) or not raw:
        raise ConfigError(
            "vocabulary must be a non-empty JSON object", field="vocab"
        )

    token_to_id: dict[str, Token] = {}
    for tok, idx in raw.items():
        # bool is an int subclass, reject it explicitly
        if not isinstance(idx, int) or isinstance(idx, bool) or idx < 0:
            raise ConfigError(
                f"token {escape_ctrl_chars(tok)!r} has invalid id {idx!r}",
                field="vocab",
            )
        token_to_id[tok] = idx
    return token_to_id


def _parse_merges(merges_text: str, token_to_id: dict[str, Token]) -> MergeRanks:
    if not merges_text or not merges_text.strip():
        raise ConfigError("merges shouldn't be empty", field="merges")

    merges: MergeRanks = {}
    rank = 0
    for lineno, line in enumerate(merges_text.splitlines(), start=1):
        line = line.strip()
        if not line or (lineno == 1 and line.startswith(MERGES_HEADER)):
            continue

        parts = line.split()
        if len(parts) != 2:
            raise ConfigError(
                f"merge rule must hold exactly two symbols: {escape_ctrl_chars(line)!r}",
                field="merges",
                line=lineno,
            )
        left, right = parts
        merged = left + right
        for sym in (left, right, merged):
            if sym not in token_to_id:
                raise ConfigError(
                    f"merge symbol {escape_ctrl_chars(sym)!r} not in vocabulary",
                    field="merges",
                    line=lineno,
                )

        pair = (token_to_id[left], token_to_id[right])
        # duplicated rules keep their first (highest priority) rank
        if pair not in merges:
            merges[pair] = (rank, token_to_id[merged])
        rank += 1

    log.debug(f"parsed {len(merges)} merge rules")
    return merges
