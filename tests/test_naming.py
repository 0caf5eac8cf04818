"""Tests for chromosome-name normalization."""

import pytest

from graphvcf.core.naming import (
    IgnoreLevel,
    canonical_chrom_key,
    normalize_chrom,
    parse_chrom_token,
)


@pytest.mark.parametrize(
    "raw", ["anything", "HG002#1#chr7", "GRCh38.chr12_random", "", "chrUn_KI270"]
)
def test_level_zero_is_identity(raw):
    assert normalize_chrom(raw, IgnoreLevel.KEEP_ALL) == raw


def test_unknown_level_behaves_as_zero():
    assert normalize_chrom("scaffold_9", 9) == "scaffold_9"
    assert normalize_chrom("scaffold_9", -1) == "scaffold_9"


def test_decorated_name_across_levels():
    raw = "GRCh38.chr12_random"
    assert normalize_chrom(raw, 1) == raw
    assert normalize_chrom(raw, 2) == raw
    assert normalize_chrom(raw, 3) is None
    assert normalize_chrom(raw, 4) == "chr12"
    assert normalize_chrom(raw, 5) == "12"


def test_level_one_requires_marker_case_insensitive():
    assert normalize_chrom("CHR7", 1) == "CHR7"
    assert normalize_chrom("HG002#1#7", 1) is None


def test_level_two_requires_token():
    assert normalize_chrom("chrX_alt", 2) == "chrX_alt"
    assert normalize_chrom("chrUn_KI270", 2) is None
    assert normalize_chrom("chr", 2) is None


def test_level_three_rejects_suffix():
    assert normalize_chrom("HG002#1#chr7", 3) == "HG002#1#chr7"
    assert normalize_chrom("chr7_alt", 3) is None


def test_standard_set():
    assert normalize_chrom("HG002#1#chr07", 4) == "chr7"
    assert normalize_chrom("chrx", 4) == "chrX"
    assert normalize_chrom("chrM", 5) == "M"
    assert normalize_chrom("chr23", 4) is None
    assert normalize_chrom("chr0", 4) is None


def test_token_follows_last_marker():
    token = parse_chrom_token("chr_asm.chr3")
    assert token.canonical == "3"
    assert token.contains_marker
    assert not token.has_trailing_suffix
    assert normalize_chrom("chr_asm.chr3", 4) == "chr3"


def test_parse_token_without_marker():
    token = parse_chrom_token("scaffold_1")
    assert token.canonical is None
    assert not token.contains_marker
    assert not token.is_standard


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("chr10", "10"),
        ("10", "10"),
        ("CHRX", "X"),
        ("MT", "M"),
        ("chrMT", "M"),
        ("23", None),
        ("chrUn", None),
        ("chr01", "1"),
    ],
)
def test_canonical_chrom_key(raw, expected):
    assert canonical_chrom_key(raw) == expected


@pytest.mark.parametrize("level", list(IgnoreLevel))
def test_very_long_digit_token_never_raises(level):
    raw = "asm.chr" + "1" * 5000
    expected = {0: raw, 1: raw, 2: raw, 3: raw}.get(int(level))
    assert normalize_chrom(raw, level) == expected


def test_zero_padded_long_token_is_canonicalized():
    assert normalize_chrom("chr" + "0" * 5000 + "7", 4) == "chr7"
    assert canonical_chrom_key("chr" + "0" * 5000 + "7") == "7"
    assert canonical_chrom_key("9" * 5000) is None
