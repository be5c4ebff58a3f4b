from __future__ import annotations

from src.modules.relay.variants import model_variants


def test_variants_in_fixed_order() -> None:
    assert model_variants("llama3-70b") == [
        "llama3-70b-32768",
        "llama3-70b-8192",
        "llama3-70b-16384",
        "llama3-70b-instruct-v0.1",
        "llama3-70b",
    ]


def test_stripped_variant_removes_known_suffix() -> None:
    assert model_variants("mixtral-8x7b-32768")[-1] == "mixtral-8x7b"
    assert model_variants("llama3-8b-8192")[-1] == "llama3-8b"
    assert model_variants("mistral-7b-Instruct-V0.1")[-1] == "mistral-7b"


def test_instruct_suffix_only_stripped_at_end() -> None:
    assert model_variants("x-instruct-v0.1-beta")[-1] == "x-instruct-v0.1-beta"
