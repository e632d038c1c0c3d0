"""Unit tests for batch padding, attention masks and array export."""

import json

import numpy as np
import pytest

import bpetok
from bpetok.errors import ConfigError

from conftest import GPT2_MERGES, merges_text


# Padding to the longest sequence
# ---------------------------------------------------------------------------


def test_pad_to_longest(gpt2_tokenizer):
    """Inputs of 3 and 5 tokens are both padded to width 5."""
    batch = gpt2_tokenizer.encode_batch([" ab", "Hello world ab"], padding_length=-1)
    assert batch.width == 5
    assert batch.attention_mask == [[1, 1, 1, 0, 0], [1, 1, 1, 1, 1]]
    pad = gpt2_tokenizer.pad_id
    assert batch.input_ids[0][3:] == [pad, pad]
    assert all(len(row) == 5 for row in batch.input_ids)


def test_mask_counts_match_token_counts(roberta_tokenizer):
    texts = ["Hello world", "", "Hello world world world", "é"]
    batch = roberta_tokenizer.encode_batch(texts)
    for text, mask in zip(texts, batch.attention_mask):
        assert sum(mask) == len(roberta_tokenizer.encode(text))
        assert len(mask) == batch.width


def test_roberta_pads_with_pad_token(roberta_tokenizer):
    batch = roberta_tokenizer.encode_batch(["Hello", "Hello world"])
    assert batch.input_ids[0] == [0, batch.input_ids[1][1], 2, 1]


def test_empty_batch(gpt2_tokenizer):
    batch = gpt2_tokenizer.encode_batch([])
    assert batch.input_ids == []
    assert batch.width == 0
    assert batch.to_numpy()["input_ids"].shape == (0, 0)


# Fixed padding length
# ---------------------------------------------------------------------------


def test_fixed_width_pads_and_truncates(roberta_tokenizer, roberta_vocab):
    batch = roberta_tokenizer.encode_batch(
        ["Hello", "Hello world world world"], padding_length=3
    )
    assert batch.width == 3
    assert batch.input_ids[0] == [0, roberta_vocab["Hello"], 2]
    # eos overflow is cut back to the fixed width
    assert batch.input_ids[1] == [0, roberta_vocab["Hello"], roberta_vocab["Ġworld"]]
    assert batch.attention_mask == [[1, 1, 1], [1, 1, 1]]


def test_configured_padding_length_is_default(roberta_vocab):
    tok = bpetok.get_tokenizer(
        "roberta", json.dumps(roberta_vocab), merges_text(GPT2_MERGES), padding_length=6
    )
    batch = tok.encode_batch(["Hello"])
    assert batch.width == 6
    assert batch.attention_mask == [[1, 1, 1, 0, 0, 0]]


@pytest.mark.parametrize("padding_length", [0, -2])
def test_invalid_padding_length(gpt2_tokenizer, padding_length):
    with pytest.raises(ConfigError):
        gpt2_tokenizer.encode_batch(["x"], padding_length=padding_length)


# Offsets and array export
# ---------------------------------------------------------------------------


def test_offsets_padded_with_zeros(roberta_tokenizer):
    batch = roberta_tokenizer.encode_batch(["Hello", "Hello world"], offsets=True)
    assert batch.offset_mapping[0] == [(0, 0), (0, 5), (0, 0), (0, 0)]
    assert batch.offset_mapping[1] == [(0, 0), (0, 5), (6, 11), (0, 0)]


def test_outputs_are_optional(gpt2_tokenizer):
    batch = gpt2_tokenizer.encode_batch(["Hello"], attention_mask=False)
    assert batch.attention_mask is None
    assert batch.offset_mapping is None


def test_to_numpy_shapes(roberta_tokenizer):
    batch = roberta_tokenizer.encode_batch(
        ["Hello", "Hello world", "x"], offsets=True
    )
    arrays = batch.to_numpy()
    assert arrays["input_ids"].shape == (3, 4)
    assert arrays["attention_mask"].shape == (3, 4)
    assert arrays["offset_mapping"].shape == (3, 4, 2)
    assert all(arr.dtype == np.int64 for arr in arrays.values())
    assert arrays["attention_mask"].sum() == 3 + 4 + 3
