"""
Message Tokenizer

Splits raw chat text into normalized word tokens.

Two modes:
    simple    → split on whitespace runs, nothing else
    advanced  → drop web links, split compounds on punctuation
                ("web-development" → "web", "development"), then normalize
                and filter every fragment

Normalization chain (order matters — each pattern assumes the output of the
previous step):
    1. Lowercase
    2. Strip characters outside U+0000–U+1FFF   (emoji, symbols, controls)
    3. Leading run of 3+ same chars → 1          ("ssshop" → "shop")
    4. Any run of 3+ same chars → 2              ("coool"  → "cool")
    5. Erase unit-with-magnitude tokens          ("15mb", "2h", "6pm", "0x1f")

Filter (a fragment survives only if all hold):
    - non-empty after normalization
    - not a web link
    - not a bare number once punctuation is stripped
    - min_token_length <= len <= max_token_length
"""

import re
import string
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from utils.logger import get_logger

logger = get_logger("tokenizer")


# ─────────────────────────────────────────────
# Patterns
# ─────────────────────────────────────────────

# ASCII punctuation plus common Unicode quotes, dashes and marks
PUNCTUATION_CHARS = string.punctuation + "–…‹›§«»¿¡≠´‘’“”⟨⟩°※©℗®℠™—"
PUNCTUATION = re.compile("[" + re.escape(PUNCTUATION_CHARS) + "]")

# Everything at or above U+2000 is noise for tokens
CHAR_FILTER = re.compile("[^\u0000-\u1fff]")

CHAR_REPEATS_BEG = re.compile(r"^((.)\2)\2+")
CHAR_REPEATS_ANY = re.compile(r"((.)\2)\2+")

# Tokens that are a magnitude with a unit; each anchors the whole token
UNIT_PATTERNS: Dict[str, re.Pattern] = {
    "data_size": re.compile(r"^[0-9]+([kmgtp])?([bб])(it|yte|ит|айт)?(s)?$"),   # 2kb, 15mb
    "seconds":   re.compile(r"^[0-9]+([nmнм])?([sс])(ec|ек)?(ond)?(s)?$"),     # 2sec, 15s
    "hours":     re.compile(r"^[0-9]+([hч])(our)?(s)?$"),                        # 2h, 15hours
    "meters":    re.compile(r"^[0-9]+([skmcdnкмдн])?([mм])(eter)?(s)?$"),        # 2m, 15meters
    "numbers":   re.compile(r"^[0-9]+(([kmкм])+|(ish|th|nd|st|rd|g|x|ый|ой|ий))?[0-9]*$"),  # 2k, 15ish
    "clock":     re.compile(r"^[0-9]+[ap]m$"),                                   # 2am, 6pm
    "hex":       re.compile(r"^(0+x)[0-9a-f]+$"),                                # 0xcafe1, not "cafe"
}

LINK_PREFIXED = re.compile(
    r".*(http://|https://|ftp://|file://|mailto:|nfs://|irc://|ssh://|telnet://|www\.).+",
    re.IGNORECASE,
)
# youtube.com, youtube.com/watch?v=oHg5SJYRHA0
LINK_BARE_DOMAIN = re.compile(r"[\w-]+(\.[\w-]+)+(/.*)?")

# float() accepts these spellings; in chat they are words
FLOAT_WORDS = frozenset({"nan", "inf", "infinity"})


# ─────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class TokenizerConfig:
    """
    Tokenizer settings.

    Attributes:
        advanced:          compound splitting + normalization + filtering
        min_token_length:  shortest kept token (inclusive)
        max_token_length:  longest kept token (inclusive)
    """
    advanced: bool = True
    min_token_length: int = 2
    max_token_length: int = 30

    def __post_init__(self):
        if self.min_token_length < 0 or self.max_token_length < 0:
            raise ValueError("Token length bounds must be non-negative")
        if self.min_token_length > self.max_token_length:
            raise ValueError(
                f"min_token_length ({self.min_token_length}) exceeds "
                f"max_token_length ({self.max_token_length})"
            )

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "TokenizerConfig":
        config = config or {}
        return cls(
            advanced=config.get("advanced", True),
            min_token_length=config.get("min_token_length", 2),
            max_token_length=config.get("max_token_length", 30),
        )


# ─────────────────────────────────────────────
# Tokenizer
# ─────────────────────────────────────────────

class Tokenizer:
    """
    Whitespace + compound tokenizer for chat messages.

    Usage:
        tokenizer = Tokenizer(TokenizerConfig(advanced=True))
        tokenizer.tokenize("web-development is sooo coool")
        # → ['web', 'development', 'is', 'soo', 'cool']
    """

    def __init__(self, config: Optional[TokenizerConfig] = None):
        self.config = config or TokenizerConfig()
        logger.debug(
            f"Tokenizer ready (advanced={self.config.advanced}, "
            f"length={self.config.min_token_length}..{self.config.max_token_length})"
        )

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "Tokenizer":
        """Build from the ``tokenizer`` section of the preprocessing config."""
        return cls(TokenizerConfig.from_config(config))

    # ── Public API ──────────────────────────────────────────────────────────

    def tokenize(self, text: Optional[str]) -> List[str]:
        """
        Tokenize text into an ordered list of tokens.

        Args:
            text: Raw message text; None or non-string input yields []

        Returns:
            Tokens in left-to-right order
        """
        if not isinstance(text, str) or not text:
            return []

        tokens = self.tokenize_simple(text)
        if self.config.advanced:
            tokens = self._split_compounds(tokens)
        return tokens

    def normalize_to_text(self, text: Optional[str]) -> str:
        """Tokenize and rejoin with single spaces (cleaned display form)."""
        return " ".join(self.tokenize(text))

    @staticmethod
    def tokenize_simple(text: str) -> List[str]:
        """Split on whitespace runs only."""
        return text.split()

    # ── Private: advanced mode ──────────────────────────────────────────────

    def _split_compounds(self, tokens: List[str]) -> List[str]:
        result = []
        for token in tokens:
            # Whole links go before splitting, otherwise "example.com" would
            # survive as "example", "com"
            if self.is_link(token.strip(PUNCTUATION_CHARS)):
                continue
            for fragment in PUNCTUATION.split(token):
                fragment = self.normalize_token(fragment)
                if self._keep(fragment):
                    result.append(fragment)
        return result

    @staticmethod
    def normalize_token(token: str) -> str:
        """Apply the normalization chain to a single fragment."""
        token = token.lower()
        token = CHAR_FILTER.sub("", token)
        token = CHAR_REPEATS_BEG.sub(r"\2", token)
        token = CHAR_REPEATS_ANY.sub(r"\2\2", token)
        for pattern in UNIT_PATTERNS.values():
            token = pattern.sub("", token)
        return token

    def _keep(self, token: str) -> bool:
        return (
            bool(token)
            and not self.is_link(token)
            and not self.is_number(PUNCTUATION.sub("", token))
            and self.config.min_token_length <= len(token) <= self.config.max_token_length
        )

    @staticmethod
    def is_link(token: str) -> bool:
        """True for http(s)/ftp/mailto/www links and bare domains."""
        if not token:
            return False
        return bool(LINK_PREFIXED.fullmatch(token) or LINK_BARE_DOMAIN.fullmatch(token))

    @staticmethod
    def is_number(token: str) -> bool:
        if token.lower().lstrip("+-") in FLOAT_WORDS:
            return False
        try:
            float(token)
        except ValueError:
            return False
        return True
