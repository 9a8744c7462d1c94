"""
Text normalization shared by catalog indexing and query processing.

Both sides go through the same folding so that resolution is
diacritic-insensitive ("Boğaziçi", "BOGAZICI" and "bogazici" are equal).
"""
import re
import unicodedata
from dataclasses import dataclass
from typing import Tuple

# Applied before Unicode decomposition; dotless/dotted i does not decompose.
_TURKISH_FOLD = str.maketrans({
    "İ": "i",
    "I": "i",
    "ı": "i",
    "Ç": "c",
    "ç": "c",
    "Ğ": "g",
    "ğ": "g",
    "Ö": "o",
    "ö": "o",
    "Ş": "s",
    "ş": "s",
    "Ü": "u",
    "ü": "u",
    "Â": "a",
    "â": "a",
    "Î": "i",
    "î": "i",
    "Û": "u",
    "û": "u",
})

_KEPT_SYMBOLS = {"%"}
_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")


@dataclass(frozen=True)
class NumericLiteral:
    """A number found in normalized text, with its character span."""
    value: float
    raw: str
    start: int
    end: int

    @property
    def is_integer(self) -> bool:
        return "." not in self.raw


@dataclass(frozen=True)
class NormalizedText:
    original: str
    text: str
    numbers: Tuple[NumericLiteral, ...]

    @property
    def tokens(self) -> Tuple[str, ...]:
        return tuple(self.text.split())


def _strip_marks(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def fold_diacritics(text: str) -> str:
    """Lowercase and fold Turkish and other Latin diacritics to ASCII letters."""
    if not text:
        return ""
    folded = _strip_marks(text.translate(_TURKISH_FOLD))
    # lower() can reintroduce marks (e.g. for dotted capitals), so strip twice
    return _strip_marks(folded.lower().translate(_TURKISH_FOLD))


def _clean_punctuation(text: str) -> str:
    chars = []
    last = len(text) - 1
    for i, ch in enumerate(text):
        if ch in ".," and 0 < i < last and text[i - 1].isdigit() and text[i + 1].isdigit():
            chars.append(".")
            continue
        category = unicodedata.category(ch)
        if ch not in _KEPT_SYMBOLS and (category[0] in ("P", "S") or category in ("Cc", "Cf")):
            chars.append(" ")
        else:
            chars.append(ch)
    return "".join(chars)


def normalize_text(text: str) -> str:
    """
    Canonicalize raw input for matching.

    :param text: Raw user or catalog text
    :return: Folded, punctuation-free, single-spaced text
    """
    if not text:
        return ""
    cleaned = _clean_punctuation(fold_diacritics(text))
    return " ".join(cleaned.split())


def extract_numbers(text: str) -> Tuple[NumericLiteral, ...]:
    """
    Find numeric literals in normalized text.

    Digits glued to words ("450puan") are picked up as well.
    """
    literals = []
    for match in _NUMBER_PATTERN.finditer(text):
        raw = match.group(0)
        try:
            value = float(raw)
        except ValueError:
            # non-ASCII digits that float() rejects stay in the text only
            continue
        literals.append(NumericLiteral(value=value, raw=raw, start=match.start(), end=match.end()))
    return tuple(literals)


def normalize(text: str) -> NormalizedText:
    """Normalize text and collect its numeric literals."""
    normalized = normalize_text(text or "")
    return NormalizedText(original=text or "", text=normalized, numbers=extract_numbers(normalized))
