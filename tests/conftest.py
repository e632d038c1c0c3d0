"""Shared fixtures: small byte-level vocabularies with hand-picked merges."""

import json

import pytest

import bpetok
from bpetok._bytes import bytes_to_unicode


GPT2_MERGES = [
    ("Ġ", "w"),
    ("o", "r"),
    ("Ġw", "or"),
    ("l", "d"),
    ("Ġwor", "ld"),
    ("H", "e"),
    ("l", "l"),
    ("He", "ll"),
    ("Hell", "o"),
]

CLIP_MERGES = [
    ("h", "e"),
    ("l", "l"),
    ("he", "ll"),
    ("hell", "o</w>"),
    ("w", "o"),
    ("wo", "r"),
    ("l", "d</w>"),
    ("wor", "ld</w>"),
]


def build_vocab(
    merges: list[tuple[str, str]],
    leading: tuple[str, ...] = (),
    trailing: tuple[str, ...] = (),
    end_of_word: bool = False,
) -> dict[str, int]:
    """Vocab of ``leading`` tokens, the 256 byte placeholders, merge results and ``trailing``."""
    tokens = list(leading)
    placeholders = list(bytes_to_unicode().values())
    tokens += placeholders
    if end_of_word:
        tokens += [p + "</w>" for p in placeholders]
    for left, right in merges:
        if left + right not in tokens:
            tokens.append(left + right)
    tokens += [t for t in trailing if t not in tokens]
    return {tok: idx for idx, tok in enumerate(tokens)}


def merges_text(merges: list[tuple[str, str]]) -> str:
    lines = ["#version: 0.2"] + [f"{left} {right}" for left, right in merges]
    return "\n".join(lines) + "\n"


@pytest.fixture
def gpt2_vocab() -> dict[str, int]:
    return build_vocab(GPT2_MERGES, trailing=("<|endoftext|>",))


@pytest.fixture
def gpt2_tokenizer(gpt2_vocab):
    """GPT-2 family tokenizer over the full byte alphabet."""
    return bpetok.get_tokenizer(
        "gpt2", json.dumps(gpt2_vocab), merges_text(GPT2_MERGES)
    )


@pytest.fixture
def roberta_vocab() -> dict[str, int]:
    return build_vocab(GPT2_MERGES, leading=("<s>", "<pad>", "</s>", "<unk>"))


@pytest.fixture
def roberta_tokenizer(roberta_vocab):
    """Roberta family tokenizer; special tokens occupy ids 0-3."""
    return bpetok.get_tokenizer(
        "roberta", json.dumps(roberta_vocab), merges_text(GPT2_MERGES)
    )


@pytest.fixture
def clip_vocab() -> dict[str, int]:
    return build_vocab(
        CLIP_MERGES,
        trailing=("<|startoftext|>", "<|endoftext|>"),
        end_of_word=True,
    )


@pytest.fixture
def clip_tokenizer(clip_vocab):
    """CLIP family tokenizer with ``</w>`` word-end symbols."""
    return bpetok.get_tokenizer("clip", json.dumps(clip_vocab), merges_text(CLIP_MERGES))
