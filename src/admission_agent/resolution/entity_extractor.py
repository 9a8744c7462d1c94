"""
Entity extraction for admission questions.

Pulls institution and program mentions, exam types, a target score and a
year out of normalized text before resolution. Works on folded text only, so
every word list below is written without Turkish letters.
"""
import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple

from ..models import ExamType
from ..normalizer import NormalizedText, NumericLiteral, normalize

# Words that end a name phrase: connectors, question words and the vocabulary
# the intent classifier keys on.
BREAK_WORDS: FrozenSet[str] = frozenset({
    "ve", "ile", "veya", "ya", "icin", "gibi", "gore", "kadar", "ayrica",
    "peki", "acaba", "ama", "fakat", "sadece", "bir", "bu", "su", "o",
    "ben", "benim", "bana", "biz", "hangi", "hangisi", "ne", "nedir", "neler",
    "nasil", "nerede", "kac", "mi", "mu", "misin", "midir", "mudur",
    "var", "yok", "olur", "olmali", "olmasi", "istiyorum", "istiyor",
    "net", "neti", "netler", "netleri", "netim", "nete", "dogru", "yanlis",
    "soru", "sayisi", "puan", "puani", "puanlari", "puanla", "puanim",
    "taban", "tavan", "siralama", "siralamasi", "sira", "sirasi", "basari",
    "kontenjan", "kontenjani", "kontenjanlari", "kisi", "kisilik", "ogrenci",
    "kapasite", "kapasitesi", "gerekir", "gerekli", "gerek", "lazim",
    "yapmam", "yapmali", "yapmaliyim", "hesapla", "hesaplar", "hesaplama",
    "listele", "goster", "soyle", "bolumler", "bolumleri", "bolumlerini",
    "programlar", "programlari", "programlarini", "okunur", "okunabilir",
    "yil", "yili", "sene", "senesi", "gecen", "son", "en", "dusuk",
    "yuksek", "hedef", "hedefim", "hedefliyorum", "almak", "alabilirim",
    "girmek", "kazanmak", "ustu", "alti", "civari",
})

# Case-suffix fragments left behind once apostrophes become spaces
# ("ODTÜ'de" -> "odtu de").
SUFFIX_FRAGMENTS: FrozenSet[str] = frozenset({
    "a", "e", "ya", "ye", "da", "de", "ta", "te", "dan", "den", "tan", "ten",
    "in", "un", "nin", "nun", "i", "u", "yi", "yu", "ndeki", "deki",
    "daki", "ndaki", "ndan", "nden", "na", "ne", "nda", "nde",
})

# Trailing words dropped from program mentions.
PROGRAM_TAIL_WORDS: FrozenSet[str] = frozenset({
    "bolumu", "bolum", "bolume", "bolumune", "bolumunun", "bolumunde",
    "programi", "program", "programina", "lisans",
})

UNIT_WORDS: Tuple[str, ...] = (
    "net", "kisi", "bin", "dogru", "yanlis", "soru", "ogrenci", "yil", "sene",
)

EXAM_TYPE_PHRASES: Tuple[Tuple[str, ExamType], ...] = (
    ("esit agirlik", ExamType.EA),
    ("yabanci dil", ExamType.DIL),
    ("sayisal", ExamType.SAY),
    ("sozel", ExamType.SOZ),
    ("say", ExamType.SAY),
    ("soz", ExamType.SOZ),
    ("ea", ExamType.EA),
    ("dil", ExamType.DIL),
    ("tyt", ExamType.TYT),
)

# Words that mark the number next to them as the score the user is aiming for.
TARGET_CUE_WORDS: FrozenSet[str] = frozenset({
    "hedef", "hedefi", "hedefim", "hedefimiz", "hedefliyorum", "hedefliyoruz",
})

_UNIVERSITY_KEYWORD = re.compile(r"^(univ\w*|uni)$")
_YEAR_RANGE = (2000, 2100)
_MAX_PLAUSIBLE_SCORE = 600.0


@dataclass(frozen=True)
class ExtractedEntity:
    """
    A mention found in normalized text.

    Attributes:
        text: Mention text (normalized)
        start_pos: Start offset in the normalized text
        end_pos: End offset in the normalized text
        source: "gazetteer", "keyword" or "remainder"
    """
    text: str
    start_pos: int
    end_pos: int
    source: str = "remainder"


@dataclass(frozen=True)
class ExtractedEntities:
    institution_mentions: Tuple[ExtractedEntity, ...] = ()
    program_mentions: Tuple[ExtractedEntity, ...] = ()
    exam_types: Tuple[ExamType, ...] = ()
    target_score: Optional[float] = None
    year: Optional[int] = None

    @property
    def exam_type(self) -> Optional[ExamType]:
        return self.exam_types[0] if self.exam_types else None

    @property
    def has_mentions(self) -> bool:
        return bool(self.institution_mentions or self.program_mentions)


@dataclass(frozen=True)
class _Token:
    text: str
    start: int
    end: int


@dataclass
class _Chunk:
    tokens: List[_Token] = field(default_factory=list)


class EntityExtractor:
    """
    Extracts candidate entities from a normalized admission question.

    Uses heuristics:
    - Phrase chunks bounded by connectors, question words, suffix fragments,
      numbers and exam codes
    - Longest gazetteer n-gram or a run ending in "universitesi" becomes an
      institution mention, leftover words become program mentions
    - Numbers become a target score or a year depending on their context

    Never raises: unknown input yields empty results.
    """

    def __init__(self, gazetteer: Iterable[str] = (), max_ngram: int = 6):
        """
        :param gazetteer: Normalized institution names and aliases
        :param max_ngram: Longest gazetteer phrase, in tokens, to look up
        """
        self._gazetteer: FrozenSet[str] = frozenset(gazetteer)
        self.max_ngram = max_ngram

    def extract(self, message) -> ExtractedEntities:
        """
        Extract entities from a message.

        :param message: NormalizedText or raw string
        :return: ExtractedEntities
        """
        normalized = message if isinstance(message, NormalizedText) else normalize(message)
        tokens = [
            _Token(m.group(0), m.start(), m.end())
            for m in re.finditer(r"\S+", normalized.text)
        ]

        exam_types, exam_token_idx = self._extract_exam_types(tokens)

        institutions: List[ExtractedEntity] = []
        programs: List[ExtractedEntity] = []
        for chunk in self._chunks(tokens, exam_token_idx):
            inst, rest = self._split_institution(chunk.tokens)
            if inst is not None:
                institutions.append(inst)
            for run in rest:
                program = self._program_mention(run)
                if program is not None:
                    programs.append(program)

        target, year = self._extract_numbers(normalized)

        return ExtractedEntities(
            institution_mentions=tuple(institutions),
            program_mentions=tuple(programs),
            exam_types=exam_types,
            target_score=target,
            year=year,
        )

    def _extract_exam_types(self, tokens: List[_Token]) -> Tuple[Tuple[ExamType, ...], Set[int]]:
        """Exam codes and names, in order of appearance."""
        found: List[Tuple[int, ExamType]] = []
        used: Set[int] = set()
        words = [t.text for t in tokens]
        for phrase, exam_type in EXAM_TYPE_PHRASES:
            parts = phrase.split()
            for i in range(len(words) - len(parts) + 1):
                span = set(range(i, i + len(parts)))
                if words[i:i + len(parts)] == parts and not span & used:
                    used |= span
                    found.append((i, exam_type))

        ordered: List[ExamType] = []
        for _, exam_type in sorted(found, key=lambda item: item[0]):
            if exam_type not in ordered:
                ordered.append(exam_type)
        return tuple(ordered), used

    def _chunks(self, tokens: List[_Token], skip: Set[int]) -> List[_Chunk]:
        chunks: List[_Chunk] = []
        current = _Chunk()
        for i, token in enumerate(tokens):
            if (
                i in skip
                or token.text in BREAK_WORDS
                or token.text in SUFFIX_FRAGMENTS
                or any(ch.isdigit() for ch in token.text)
                or "%" in token.text
            ):
                if current.tokens:
                    chunks.append(current)
                current = _Chunk()
                continue
            current.tokens.append(token)
        if current.tokens:
            chunks.append(current)
        return chunks

    def _split_institution(
        self, tokens: List[_Token]
    ) -> Tuple[Optional[ExtractedEntity], List[List[_Token]]]:
        """Find the institution inside a chunk; return it and the leftover runs."""
        span = self._gazetteer_span(tokens)
        source = "gazetteer"
        if span is None:
            span = self._keyword_span(tokens)
            source = "keyword"
        if span is None:
            return None, [tokens]

        start, end = span
        entity = self._entity(tokens[start:end], source)
        leftovers = [run for run in (tokens[:start], tokens[end:]) if run]
        return entity, leftovers

    def _gazetteer_span(self, tokens: List[_Token]) -> Optional[Tuple[int, int]]:
        if not self._gazetteer:
            return None
        words = [t.text for t in tokens]
        for size in range(min(self.max_ngram, len(words)), 0, -1):
            for start in range(len(words) - size + 1):
                if " ".join(words[start:start + size]) in self._gazetteer:
                    return start, start + size
        return None

    def _keyword_span(self, tokens: List[_Token]) -> Optional[Tuple[int, int]]:
        for i, token in enumerate(tokens):
            if i > 0 and _UNIVERSITY_KEYWORD.match(token.text):
                return 0, i + 1
        return None

    def _program_mention(self, tokens: List[_Token]) -> Optional[ExtractedEntity]:
        while tokens and tokens[-1].text in PROGRAM_TAIL_WORDS:
            tokens = tokens[:-1]
        if not tokens:
            return None
        entity = self._entity(tokens, "remainder")
        if len(entity.text) < 2:
            return None
        return entity

    @staticmethod
    def _entity(tokens: List[_Token], source: str) -> ExtractedEntity:
        return ExtractedEntity(
            text=" ".join(t.text for t in tokens),
            start_pos=tokens[0].start,
            end_pos=tokens[-1].end,
            source=source,
        )

    def _extract_numbers(self, normalized: NormalizedText) -> Tuple[Optional[float], Optional[int]]:
        """
        Target score and year from numeric literals.

        A literal followed by "puan", or stated as a goal ("hedefim 480",
        "480 hedefliyorum"), is always the target (validated later); otherwise
        the first literal in (0, 600] without a unit word wins.
        """
        text = normalized.text
        explicit: Optional[float] = None
        plausible: Optional[float] = None
        year: Optional[int] = None

        for literal in normalized.numbers:
            if self._is_percentage(text, literal):
                continue
            following = text[literal.end:].lstrip()
            preceding = text[:literal.start].split()[-1:]
            after = following.split()[:1]
            goal = bool(preceding) and preceding[0] in TARGET_CUE_WORDS
            if (
                year is None
                and not goal
                and literal.is_integer
                and len(literal.raw) == 4
                and _YEAR_RANGE[0] <= literal.value <= _YEAR_RANGE[1]
                and not following.startswith("puan")
            ):
                year = int(literal.value)
                continue
            if following.startswith("puan"):
                if explicit is None:
                    explicit = literal.value
                continue
            if following.startswith(UNIT_WORDS):
                continue
            if goal or (after and after[0] in TARGET_CUE_WORDS):
                if explicit is None:
                    explicit = literal.value
                continue
            if plausible is None and 0 < literal.value <= _MAX_PLAUSIBLE_SCORE:
                plausible = literal.value

        return (explicit if explicit is not None else plausible), year

    @staticmethod
    def _is_percentage(text: str, literal: NumericLiteral) -> bool:
        before = text[literal.start - 1] if literal.start > 0 else ""
        after = text[literal.end] if literal.end < len(text) else ""
        return before == "%" or after == "%"
