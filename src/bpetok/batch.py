"""Batch tokenization with padding, attention masks and offset mappings."""

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

import numpy as np

from .errors import ConfigError
from .types import OffsetMapping, Token

if TYPE_CHECKING:
    from .strategy import SpecialTokenStrategy
    from .tokenizer import BpeTokenizer

log = logging.getLogger(__name__)

# padding_length value meaning "pad to the longest sequence in the batch"
PAD_TO_LONGEST = -1


@dataclass
class BatchEncoding:
    """Padded outputs of one batch, all rows share the same width."""

    input_ids: list[list[Token]]
    attention_mask: list[list[int]] | None = None
    offset_mapping: list[OffsetMapping] | None = None

    @property
    def width(self) -> int:
        return len(self.input_ids[0]) if self.input_ids else 0

    def __len__(self) -> int:
        return len(self.input_ids)

    def to_numpy(self) -> dict[str, np.ndarray]:
        """
        Return the outputs as ``int64`` arrays.

        ``input_ids`` and ``attention_mask`` are shaped ``(batch, width)``,
        ``offset_mapping`` is shaped ``(batch, width, 2)``.
        """
        shape = (len(self.input_ids), self.width)
        out = {"input_ids": np.asarray(self.input_ids, dtype=np.int64).reshape(shape)}
        if self.attention_mask is not None:
            out["attention_mask"] = np.asarray(
                self.attention_mask, dtype=np.int64
            ).reshape(shape)
        if self.offset_mapping is not None:
            out["offset_mapping"] = np.asarray(
                self.offset_mapping, dtype=np.int64
            ).reshape(*shape, 2)
        return out


def encode_batch(
    tokenizer: "BpeTokenizer",
    texts: list[str],
    padding_length: int | None = None,
    attention_mask: bool = True,
    offsets: bool = False,
    strategy: "SpecialTokenStrategy | None" = None,
) -> BatchEncoding:
    """
    Tokenize every text and pad the results to a common width.

    With ``padding_length == -1`` the width is the longest tokenized text.
    A positive value fixes the width: it also bounds tokenization of each text
    and longer results are truncated to it. Padding positions get the pad id,
    a zero attention mask and a ``(0, 0)`` offset.

    :param tokenizer: Tokenizer used for every text.
    :param texts: Texts to tokenize.
    :param padding_length: Overrides the tokenizer's configured padding length.
    :param attention_mask: Also return the 0/1 attention mask.
    :param offsets: Also return per-token character offsets.
    :param strategy: Special token strategy forwarded to ``tokenize``.
    :raises ConfigError: If ``padding_length`` is neither -1 nor positive.
    """
    if padding_length is None:
        padding_length = tokenizer.config.padding_length
    if padding_length != PAD_TO_LONGEST and padding_length <= 0:
        raise ConfigError(
            "padding_length should be more than 0 or equal -1", field="padding_length"
        )

    max_length = None if padding_length == PAD_TO_LONGEST else padding_length
    results = [
        tokenizer.tokenize(text, max_length=max_length, offsets=offsets, strategy=strategy)
        for text in texts
    ]

    if padding_length == PAD_TO_LONGEST:
        width = max((len(res) for res in results), default=0)
    else:
        width = padding_length

    input_ids: list[list[Token]] = []
    masks: list[list[int]] = []
    spans: list[OffsetMapping] = []
    for res in results:
        if len(res) > width:
            log.debug(f"truncating {len(res)} tokens to padding length {width}")
        ids = res.ids[:width]
        n_pad = width - len(ids)
        input_ids.append(ids + [tokenizer.pad_id] * n_pad)
        masks.append([1] * len(ids) + [0] * n_pad)
        if res.offsets is not None:
            spans.append(res.offsets[:width] + [(0, 0)] * n_pad)

    return BatchEncoding(
        input_ids=input_ids,
        attention_mask=masks if attention_mask else None,
        offset_mapping=spans if offsets else None,
    )


__all__ = ["PAD_TO_LONGEST", "BatchEncoding", "encode_batch"]
