"""
Test suite for the message tokenizer

Covers simple/advanced modes, the normalization chain, the token filter,
and the end-to-end behaviour on chat-like text.
"""

import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from preprocessing.tokenizer import Tokenizer, TokenizerConfig


SAMPLE_TEXTS = [
    "Check this out: WWW.Example.com!! It costs 15kb and takes 2h :)",
    "web-development is sooooo coool, yesss!!!",
    "Встреча в 6pm, возьми 2kb файл и 0xCAFE1",
    "«quoted» text — with dashes… and ‘quotes’",
    "mailto:bob@example.org or https://example.com/x?y=1 or youtube.com/watch?v=abc",
    "Numbers 42 3.14 web2 15ish 3rd 2k",
    "ssssshop aaaaa bbb ccccc!!!! 😍😍 héllo",
]


# ═══════════════════════════════════════════════════════════
# SECTION 1 — Modes
# ═══════════════════════════════════════════════════════════

class TestTokenizerModes:

    def test_simple_mode_splits_on_whitespace_only(self):
        tokenizer = Tokenizer(TokenizerConfig(advanced=False))
        assert tokenizer.tokenize("Hello,  World!!\n15kb") == ["Hello,", "World!!", "15kb"]

    def test_advanced_is_default(self):
        assert Tokenizer().config.advanced is True

    def test_compound_split(self):
        assert Tokenizer().tokenize("web-development") == ["web", "development"]

    def test_unicode_punctuation_splits(self):
        tokens = Tokenizer().tokenize("«quoted»—dash")
        assert tokens == ["quoted", "dash"]

    def test_apostrophe_fragment_too_short(self):
        assert Tokenizer().tokenize("can't") == ["can"]

    @pytest.mark.parametrize("text", ["", "   \n\t", None])
    def test_empty_input_yields_no_tokens(self, text):
        assert Tokenizer().tokenize(text) == []

    def test_non_string_input_yields_no_tokens(self):
        assert Tokenizer().tokenize(12345) == []


# ═══════════════════════════════════════════════════════════
# SECTION 2 — Normalization chain
# ═══════════════════════════════════════════════════════════

class TestNormalization:

    def setup_method(self):
        self.tokenizer = Tokenizer()

    def test_lowercased(self):
        assert self.tokenizer.tokenize("HeLLo") == ["hello"]

    def test_leading_repeats_collapse_to_one(self):
        assert self.tokenizer.tokenize("sssshop") == ["shop"]

    def test_trailing_repeats_collapse_to_two(self):
        assert self.tokenizer.tokenize("yessss") == ["yess"]

    def test_middle_repeats_collapse_to_two(self):
        assert self.tokenizer.tokenize("coool") == ["cool"]

    def test_double_letters_untouched(self):
        assert self.tokenizer.tokenize("book") == ["book"]

    def test_emoji_stripped(self):
        assert self.tokenizer.tokenize("love 😍 it😂") == ["love", "it"]

    def test_latin_and_cyrillic_kept(self):
        assert self.tokenizer.tokenize("Héllo Привет") == ["héllo", "привет"]

    @pytest.mark.parametrize("token", [
        "15mb", "2kb", "15sec", "15s", "2h", "15hours",
        "2m", "15meters", "2k", "15ish", "3rd", "6pm", "2am",
        "0xCAFE1", "0x1f",
    ])
    def test_unit_with_magnitude_erased(self, token):
        assert Tokenizer.normalize_token(token) == ""
        assert self.tokenizer.tokenize(token) == []

    @pytest.mark.parametrize("word", ["ABBA", "CAFE", "web2"])
    def test_words_resembling_units_survive(self, word):
        assert self.tokenizer.tokenize(word) == [word.lower()]


# ═══════════════════════════════════════════════════════════
# SECTION 3 — Filter
# ═══════════════════════════════════════════════════════════

class TestFilter:

    def setup_method(self):
        self.tokenizer = Tokenizer()

    @pytest.mark.parametrize("link", [
        "https://example.com/x",
        "http://example.com",
        "ftp://files.example.org/a.txt",
        "mailto:bob@example.org",
        "www.example.com",
        "WWW.Example.com!!",
        "youtube.com/watch?v=abc",
        "(example.org)",
    ])
    def test_links_removed(self, link):
        assert self.tokenizer.tokenize(f"see {link} now") == ["see", "now"]

    def test_is_link(self):
        assert Tokenizer.is_link("youtube.com")
        assert Tokenizer.is_link("ssh://host")
        assert not Tokenizer.is_link("youtube")
        assert not Tokenizer.is_link("http://")
        assert not Tokenizer.is_link("")

    def test_bare_numbers_removed(self):
        assert self.tokenizer.tokenize("42 3.14 1e5 007") == []

    def test_is_number(self):
        assert Tokenizer.is_number("42")
        assert Tokenizer.is_number("3.14")
        assert not Tokenizer.is_number("web2")
        assert not Tokenizer.is_number("nan")
        assert not Tokenizer.is_number("inf")
        assert not Tokenizer.is_number("Infinity")

    def test_overflowing_exponent_is_a_number(self):
        assert Tokenizer.is_number("1e400")
        assert self.tokenizer.tokenize("1e400 nan") == ["nan"]

    def test_default_length_bounds(self):
        ok = "ab" * 15           # 30 chars
        too_long = ok + "c"      # 31 chars
        assert self.tokenizer.tokenize(f"a {ok} {too_long}") == [ok]

    def test_custom_length_bounds(self):
        tokenizer = Tokenizer(TokenizerConfig(min_token_length=3, max_token_length=5))
        assert tokenizer.tokenize("a ab abc abcdef abcde") == ["abc", "abcde"]

    @pytest.mark.parametrize("text", SAMPLE_TEXTS)
    def test_tokens_always_within_bounds(self, text):
        config = TokenizerConfig(min_token_length=3, max_token_length=6)
        for token in Tokenizer(config).tokenize(text):
            assert 3 <= len(token) <= 6


# ═══════════════════════════════════════════════════════════
# SECTION 4 — End-to-end and properties
# ═══════════════════════════════════════════════════════════

class TestEndToEnd:

    def setup_method(self):
        self.tokenizer = Tokenizer(
            TokenizerConfig(advanced=True, min_token_length=2, max_token_length=30)
        )

    def test_chat_message(self):
        text = "Check this out: WWW.Example.com!! It costs 15kb and takes 2h :)"
        assert self.tokenizer.tokenize(text) == [
            "check", "this", "out", "it", "costs", "and", "takes",
        ]

    def test_normalize_to_text(self):
        text = "Check this out: WWW.Example.com!! It costs 15kb"
        assert self.tokenizer.normalize_to_text(text) == "check this out it costs"

    def test_normalize_to_text_empty(self):
        assert self.tokenizer.normalize_to_text(None) == ""

    @pytest.mark.parametrize("text", SAMPLE_TEXTS)
    def test_retokenizing_normalized_text_is_stable(self, text):
        first = self.tokenizer.tokenize(text)
        assert self.tokenizer.tokenize(" ".join(first)) == first

    def test_token_order_follows_text(self):
        tokens = self.tokenizer.tokenize("zebra apple mango")
        assert tokens == ["zebra", "apple", "mango"]


# ═══════════════════════════════════════════════════════════
# SECTION 5 — Configuration
# ═══════════════════════════════════════════════════════════

class TestTokenizerConfig:

    def test_min_above_max_raises(self):
        with pytest.raises(ValueError):
            TokenizerConfig(min_token_length=5, max_token_length=2)

    def test_negative_bound_raises(self):
        with pytest.raises(ValueError):
            TokenizerConfig(min_token_length=-1)

    def test_config_is_frozen(self):
        config = TokenizerConfig()
        with pytest.raises(Exception):
            config.min_token_length = 10

    def test_from_config(self):
        tokenizer = Tokenizer.from_config(
            {"advanced": False, "min_token_length": 1, "max_token_length": 10}
        )
        assert tokenizer.config == TokenizerConfig(False, 1, 10)

    def test_from_empty_config_uses_defaults(self):
        assert Tokenizer.from_config(None).config == TokenizerConfig()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
