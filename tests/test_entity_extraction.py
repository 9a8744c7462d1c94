"""
Tests for entity extraction from admission questions.
"""
import pytest

from admission_agent.models import ExamType
from admission_agent.resolution import EntityExtractor


@pytest.fixture
def extractor():
    gazetteer = {
        "test universitesi", "test uni", "tu",
        "orta dogu teknik universitesi", "odtu", "metu",
        "bogazici universitesi", "bogazici", "boun",
    }
    return EntityExtractor(gazetteer)


def _texts(mentions):
    return [m.text for m in mentions]


class TestMentionExtraction:
    """Tests for institution and program mentions."""

    def test_abbreviation_and_program(self, extractor):
        """Test that an abbreviation and a program name are separated."""
        result = extractor.extract("ODTÜ bilgisayar mühendisliği için kaç net gerekir?")

        assert _texts(result.institution_mentions) == ["odtu"]
        assert _texts(result.program_mentions) == ["bilgisayar muhendisligi"]

    def test_short_alias_is_found(self, extractor):
        """Test that a two-letter alias in the gazetteer is an institution."""
        result = extractor.extract("TÜ bilgisayar mühendisliği")

        assert _texts(result.institution_mentions) == ["tu"]
        assert _texts(result.program_mentions) == ["bilgisayar muhendisligi"]

    def test_longest_gazetteer_phrase_wins(self, extractor):
        """Test that the full institution name is preferred over a shorter alias."""
        result = extractor.extract("Test Üniversitesi işletme taban puanı")

        assert _texts(result.institution_mentions) == ["test universitesi"]
        assert _texts(result.program_mentions) == ["isletme"]

    def test_university_keyword_without_gazetteer(self):
        """Test that a run ending in 'üniversitesi' is an institution mention."""
        extractor = EntityExtractor()

        result = extractor.extract("Hacettepe Üniversitesi tıp kontenjanı")

        assert _texts(result.institution_mentions) == ["hacettepe universitesi"]
        assert result.institution_mentions[0].source == "keyword"
        assert _texts(result.program_mentions) == ["tip"]

    def test_case_suffix_is_dropped(self, extractor):
        """Test that an apostrophe suffix does not join the mention."""
        result = extractor.extract("ODTÜ'de hangi bölümler var?")

        assert _texts(result.institution_mentions) == ["odtu"]
        assert result.program_mentions == ()

    def test_program_tail_word_is_dropped(self, extractor):
        """Test that 'bölümü' after a program name is not part of the mention."""
        result = extractor.extract("bilgisayar mühendisliği bölümü taban puanı")

        assert _texts(result.program_mentions) == ["bilgisayar muhendisligi"]

    def test_positions_refer_to_normalized_text(self, extractor):
        """Test that mention offsets slice the normalized text."""
        text = "odtu bilgisayar muhendisligi"

        result = extractor.extract(text)
        mention = result.program_mentions[0]

        assert text[mention.start_pos:mention.end_pos] == mention.text

    def test_empty_message(self, extractor):
        """Test that an empty message yields empty results."""
        result = extractor.extract("")

        assert not result.has_mentions
        assert result.exam_type is None
        assert result.target_score is None
        assert result.year is None


class TestExamTypeExtraction:
    """Tests for exam type extraction."""

    @pytest.mark.parametrize("message,expected", [
        ("sayısal puanla", ExamType.SAY),
        ("eşit ağırlık için", ExamType.EA),
        ("SÖZ puan türü", ExamType.SOZ),
        ("yabancı dil", ExamType.DIL),
        ("EA ile", ExamType.EA),
    ])
    def test_exam_type_phrases(self, extractor, message, expected):
        """Test that exam type codes and names are recognized."""
        assert extractor.extract(message).exam_type == expected

    def test_exam_code_does_not_join_program(self, extractor):
        """Test that an exam code splits the program mention."""
        result = extractor.extract("TÜ işletme EA taban puanı")

        assert _texts(result.program_mentions) == ["isletme"]
        assert result.exam_types == (ExamType.EA,)


class TestNumberExtraction:
    """Tests for target score and year extraction."""

    def test_score_followed_by_puan(self, extractor):
        """Test that a number followed by 'puan' is the target score."""
        assert extractor.extract("450 puan hedefliyorum").target_score == 450.0

    def test_out_of_range_score_is_still_extracted(self, extractor):
        """Test that an unrealistic 'N puan' target is kept for validation."""
        assert extractor.extract("700 puan alırsam").target_score == 700.0

    def test_plain_number_in_score_range(self, extractor):
        """Test that a bare number in the score range is the target."""
        assert extractor.extract("hedefim 480").target_score == 480.0

    @pytest.mark.parametrize("message", [
        "hedefim 700",
        "TÜ bilgisayar mühendisliği hedefim 700, kaç net gerekir?",
        "700 hedefliyorum",
    ])
    def test_stated_goal_is_target_even_out_of_range(self, extractor, message):
        """Test that a number stated as a goal is kept for validation like 'N puan'."""
        assert extractor.extract(message).target_score == 700.0

    def test_goal_in_nets_is_not_a_score(self, extractor):
        """Test that 'hedefim 40 net' is a net count, not a target score."""
        assert extractor.extract("hedefim 40 net").target_score is None

    def test_number_with_unit_is_not_a_score(self, extractor):
        """Test that '40 net' is not mistaken for a target score."""
        assert extractor.extract("matematikten 40 net").target_score is None

    def test_percentage_is_ignored(self, extractor):
        """Test that a percentage is neither a score nor a year."""
        result = extractor.extract("%5 marj ile")

        assert result.target_score is None
        assert result.year is None

    def test_year(self, extractor):
        """Test that a four-digit year is extracted as a year."""
        result = extractor.extract("2023 yılı taban puanı")

        assert result.year == 2023
        assert result.target_score is None

    def test_year_and_score_together(self, extractor):
        """Test that a year and a target score are both extracted."""
        result = extractor.extract("2024 verisiyle 455,5 puan")

        assert result.year == 2024
        assert result.target_score == 455.5
