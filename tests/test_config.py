"""Unit tests for family configuration and tokenizer factories."""

import json

import pytest

import bpetok
from bpetok import CLIP_CONFIG, GPT2_CONFIG, ROBERTA_CONFIG, ModelFamily
from bpetok.errors import ConfigError, InternalInvariantError

from conftest import GPT2_MERGES, merges_text


# Family configuration
# ---------------------------------------------------------------------------


def test_family_lookup_is_case_insensitive():
    assert ModelFamily.get("roberta") is ModelFamily.ROBERTA
    assert ModelFamily.get("CLIP") is ModelFamily.CLIP
    assert ModelFamily.get(ModelFamily.GPT2) is ModelFamily.GPT2
    assert bpetok.list_families() == ["GPT2", "Roberta", "CLIP"]


def test_unknown_family():
    with pytest.raises(ConfigError):
        ModelFamily.get("bert")


def test_family_flags():
    assert not GPT2_CONFIG.adds_bos_eos
    assert ROBERTA_CONFIG.adds_bos_eos and not ROBERTA_CONFIG.cleans_spaces
    assert CLIP_CONFIG.adds_bos_eos and CLIP_CONFIG.cleans_spaces


def test_special_tokens_deduplicated():
    assert CLIP_CONFIG.special_tokens() == ["<|endoftext|>", "<|startoftext|>"]
    assert ROBERTA_CONFIG.special_tokens() == ["<unk>", "<s>", "</s>", "<pad>"]
    assert GPT2_CONFIG.special_tokens() == ["<|endoftext|>"]


def test_overrides_return_new_config():
    conf = bpetok.get_config("roberta", padding_length=32)
    assert conf.padding_length == 32
    assert ROBERTA_CONFIG.padding_length == -1


@pytest.mark.parametrize(
    "overrides",
    [
        {"padding_length": 0},
        {"padding_length": -3},
        {"unk_token": ""},
        {"cache_capacity": 0},
        {"no_such_option": 1},
    ],
)
def test_invalid_overrides(overrides):
    with pytest.raises(ConfigError):
        bpetok.get_config("gpt2", **overrides)


# Factories
# ---------------------------------------------------------------------------


def test_get_tokenizer_extra_special_tokens(gpt2_vocab):
    tok = bpetok.get_tokenizer(
        "gpt2",
        json.dumps(gpt2_vocab),
        merges_text(GPT2_MERGES),
        special_tokens=["<|sep|>"],
    )
    sep = tok.vocab.get_token_id("<|sep|>")
    assert sep == max(gpt2_vocab.values()) + 1
    assert tok.encode("Hello<|sep|>") == [gpt2_vocab["Hello"], sep]


def test_from_pretrained_reads_directory(gpt2_vocab, tmp_path):
    (tmp_path / "vocab.json").write_text(json.dumps(gpt2_vocab), encoding="utf-8")
    (tmp_path / "merges.txt").write_text(merges_text(GPT2_MERGES), encoding="utf-8")
    tok = bpetok.from_pretrained(tmp_path, "gpt2")
    assert tok.encode("Hello world") == [gpt2_vocab["Hello"], gpt2_vocab["Ġworld"]]


def test_from_files_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        bpetok.from_files(tmp_path / "vocab.json", tmp_path / "merges.txt", "gpt2")


def test_try_load_reports_failure():
    result = bpetok.try_load("roberta", "", "a b")
    assert not result.ok
    assert result.tokenizer is None
    assert isinstance(result.error, ConfigError)
    with pytest.raises(ConfigError):
        result.unwrap()


def test_try_load_success(gpt2_vocab):
    result = bpetok.try_load("gpt2", json.dumps(gpt2_vocab), merges_text(GPT2_MERGES))
    assert result.ok
    assert result.unwrap().family is ModelFamily.GPT2


def test_custom_split_pattern(gpt2_vocab):
    tok = bpetok.get_tokenizer(
        "gpt2", json.dumps(gpt2_vocab), merges_text(GPT2_MERGES), pattern=r"\S+|\s+"
    )
    assert tok.encode("Hello world") == [
        gpt2_vocab["Hello"],
        gpt2_vocab["Ġ"],
        gpt2_vocab["w"],
        gpt2_vocab["or"],
        gpt2_vocab["ld"],
    ]


def test_invalid_split_pattern(gpt2_vocab):
    with pytest.raises(bpetok.PatternError):
        bpetok.get_tokenizer(
            "gpt2", json.dumps(gpt2_vocab), merges_text(GPT2_MERGES), pattern="("
        )


@pytest.mark.parametrize("name", [None, 3, ["gpt2"]])
def test_family_lookup_rejects_non_strings(name):
    with pytest.raises(ConfigError):
        ModelFamily.get(name)


def test_empty_load_result_unwrap_raises():
    with pytest.raises(InternalInvariantError):
        bpetok.LoadResult().unwrap()
