"""
Tests for the institution and program resolution layer.
"""
import pytest

from admission_agent.catalog import InMemoryCatalog
from admission_agent.models import Institution, Program
from admission_agent.resolution import (
    CatalogIndex,
    EntityResolver,
    ExactNameMatcher,
    FuzzyNameMatcher,
    MatchScore,
    ResolutionMetadata,
    ResolutionPolicy,
    ResolutionStatus,
    create_entity_resolver,
)


class TestExactNameMatcher:
    """Tests for ExactNameMatcher."""

    def test_exact_match_on_alias(self):
        """Test that exact matcher accepts any normalized variant."""
        matcher = ExactNameMatcher()

        result = matcher.match("odtu", ["orta dogu teknik universitesi", "metu", "odtu"])

        assert result.score == 1.0
        assert result.variant == "odtu"
        assert result.strategy == "exact"

    def test_exact_match_no_match(self):
        """Test that exact matcher scores 0.0 when nothing is equal."""
        result = ExactNameMatcher().match("odt", ["odtu", "metu"])

        assert result.score == 0.0
        assert result.variant is None


class TestFuzzyNameMatcher:
    """Tests for FuzzyNameMatcher."""

    def test_fuzzy_match_corrects_typo(self):
        """Test that a one-letter typo still scores high."""
        matcher = FuzzyNameMatcher()

        result = matcher.match("bilgisayr muhendisligi", ["bilgisayar muhendisligi"])

        assert result.score >= 0.9
        assert result.strategy == "fuzzy"

    def test_word_boundary_containment(self):
        """Test that a partial name contained in the full name scores as containment."""
        matcher = FuzzyNameMatcher()

        result = matcher.match("bogazici", ["bogazici universitesi"])

        assert result.strategy == "containment"
        assert 0.85 < result.score < 0.99

    def test_containment_needs_word_boundary(self):
        """Test that a substring inside a word is not containment."""
        result = FuzzyNameMatcher().match("tu", ["odtu"])

        assert result.strategy == "fuzzy"

    def test_score_never_reaches_exact(self):
        """Test that fuzzy scores stay below an exact match."""
        result = FuzzyNameMatcher().match("hukuk", ["hukuk"])

        assert result.score < 1.0

    def test_unrelated_names_score_low(self):
        """Test that unrelated names score below the similarity floor."""
        result = FuzzyNameMatcher().match("qwerty", ["hukuk", "isletme"])

        assert result.score < 0.55

    def test_shared_university_word_is_not_similarity(self):
        """Test that two different universities are not close because of 'universitesi'."""
        result = FuzzyNameMatcher().match("bilkent universitesi", ["test universitesi"])

        assert result.score < 0.55

    def test_typo_next_to_university_word(self):
        """Test that a typo in the distinctive part still matches."""
        result = FuzzyNameMatcher().match("bogazci universitesi", ["bogazici universitesi"])

        assert result.score >= 0.9

    def test_empty_variants(self):
        """Test that empty variants give a zero score."""
        assert FuzzyNameMatcher().match("odtu", []).score == 0.0

    def test_unknown_scorer_raises(self):
        """Test that an unknown scorer name is rejected."""
        with pytest.raises(ValueError):
            FuzzyNameMatcher(scorer="unknown")


class TestMatchScore:
    """Tests for MatchScore validation."""

    def test_score_out_of_range_raises(self):
        """Test that scores outside [0, 1] are rejected."""
        with pytest.raises(ValueError):
            MatchScore(score=1.5, strategy="exact")


class TestCatalogIndex:
    """Tests for CatalogIndex snapshots."""

    def test_build_collects_variants(self, catalog):
        """Test that aliases end up as normalized variants."""
        index = CatalogIndex.build(catalog)

        entry = next(e for e in index.institutions if e.entity_id == 1)
        assert entry.variants[0] == "test universitesi"
        assert set(entry.variants) == {"test universitesi", "test uni", "tu"}

    def test_program_label_includes_institution(self, catalog):
        """Test that program labels carry the institution name."""
        index = CatalogIndex.build(catalog)

        labels = {e.entity_id: e.label for e in index.programs}
        assert labels[101] == "Bilgisayar Mühendisliği (Test Üniversitesi)"

    def test_programs_by_institution_is_read_only(self, catalog):
        """Test that the grouped program mapping cannot be modified."""
        index = CatalogIndex.build(catalog)

        with pytest.raises(TypeError):
            index.programs_by_institution[99] = ()

    def test_gazetteer_holds_institution_variants(self, catalog):
        """Test that every institution variant is in the gazetteer."""
        index = CatalogIndex.build(catalog)

        assert {"odtu", "metu", "tu", "bogazici"} <= index.institution_gazetteer

    def test_empty_index(self):
        """Test that an empty index has no entries."""
        index = CatalogIndex.empty()

        assert index.institutions == ()
        assert index.program_entries(1) == ()


class TestResolutionPolicy:
    """Tests for ResolutionPolicy."""

    def test_requires_matchers(self):
        """Test that a policy without matchers is rejected."""
        with pytest.raises(ValueError):
            ResolutionPolicy([])

    def test_empty_query_is_not_found(self, catalog):
        """Test that an empty query resolves to not_found."""
        policy = ResolutionPolicy([ExactNameMatcher()])
        index = CatalogIndex.build(catalog)

        result = policy.resolve("  ", index.institutions)

        assert result.status == ResolutionStatus.NOT_FOUND
        assert result.candidates == ()


class TestEntityResolver:
    """Tests for EntityResolver."""

    @pytest.mark.parametrize("mention", ["Boğaziçi", "BOGAZICI", "bogazici", "BOUN"])
    def test_spelling_variants_resolve_to_same_institution(self, resolver, mention):
        """Test that diacritic, case and alias variants resolve identically."""
        result = resolver.resolve_institution(mention)

        assert result.is_resolved
        assert result.entity.id == 3

    def test_full_name_resolves(self, resolver):
        """Test that the canonical name resolves with confidence 1.0."""
        result = resolver.resolve_institution("Orta Doğu Teknik Üniversitesi")

        assert result.entity.id == 2
        assert result.confidence == 1.0

    def test_close_candidates_are_ambiguous(self, resolver):
        """Test that two similar institutions produce an ambiguous result."""
        result = resolver.resolve_institution("teknik universitesi")

        assert result.status == ResolutionStatus.AMBIGUOUS
        assert result.entity is None
        assert {2, 4} <= {c.entity_id for c in result.candidates}
        assert len(result.candidates) <= 3

    def test_candidates_sorted_by_score(self, resolver):
        """Test that candidates come best first."""
        result = resolver.resolve_institution("teknik universitesi")

        scores = [c.score for c in result.candidates]
        assert scores == sorted(scores, reverse=True)

    def test_unknown_name_is_not_found(self, resolver):
        """Test that an unrelated mention is not found."""
        result = resolver.resolve_institution("qwerty")

        assert result.status == ResolutionStatus.NOT_FOUND
        assert result.best is None

    def test_unknown_university_is_not_found(self, resolver):
        """Test that a university missing from the catalog is not matched to another one."""
        result = resolver.resolve_institution("Bilkent Üniversitesi")

        assert result.status == ResolutionStatus.NOT_FOUND

    def test_resolves_against_given_snapshot(self, resolver, catalog, institutions, programs):
        """Test that a passed index is used instead of the current one."""
        old = resolver.index
        resolver.rebuild(InMemoryCatalog(institutions + [Institution(9, "Ege Üniversitesi")], programs))

        assert resolver.resolve_institution("Ege Üniversitesi").is_resolved
        assert not resolver.resolve_institution("Ege Üniversitesi", index=old).is_resolved
        assert resolver.resolve_program("hukuk", 1, index=old).entity.id == 104

    def test_program_scoped_to_institution(self, resolver):
        """Test that a program resolves within its institution."""
        result = resolver.resolve_program("bilgisayar muhendisligi", institution_id=1)

        assert result.is_resolved
        assert result.entity.id == 101

    def test_program_alias(self, resolver):
        """Test that a program alias resolves."""
        result = resolver.resolve_program("EEM", institution_id=1)

        assert result.entity.id == 102

    def test_unscoped_program_is_ambiguous(self, resolver):
        """Test that a program name shared by institutions is ambiguous."""
        result = resolver.resolve_program("bilgisayar mühendisliği")

        assert result.status == ResolutionStatus.AMBIGUOUS
        assert len(result.candidates) == 3
        assert all(c.score == 1.0 for c in result.candidates)

    def test_tie_order_is_stable(self, resolver):
        """Test that equal scores are ordered by label, the same every time."""
        first = resolver.resolve_program("bilgisayar muhendisligi")
        second = resolver.resolve_program("bilgisayar muhendisligi")

        labels = [c.label for c in first.candidates]
        assert labels == sorted(labels)
        assert first == second

    def test_resolve_best_prefers_resolved(self, resolver):
        """Test that the best result across mentions is the resolved one."""
        result = resolver.resolve_best_institution(["qwerty", "odtu"])

        assert result.is_resolved
        assert result.entity.id == 2

    def test_resolve_best_without_mentions(self, resolver):
        """Test that no mentions give no result."""
        assert resolver.resolve_best_program([]) is None

    def test_search_programs_across_institutions(self, resolver):
        """Test that a phrase search lists programs of every institution."""
        candidates = resolver.search_programs("isletme")

        assert {103, 302} <= {c.entity_id for c in candidates}

    def test_rebuild_swaps_index(self, resolver, institutions, programs):
        """Test that rebuild replaces the snapshot and bumps its version."""
        old_index = resolver.index
        extended = InMemoryCatalog(
            institutions + [Institution(9, "Ege Üniversitesi", "İzmir")],
            programs + [Program(901, 9, "Tıp")],
        )

        new_index = resolver.rebuild(extended)

        assert resolver.index is new_index
        assert new_index.version == old_index.version + 1
        assert resolver.resolve_institution("Ege Üniversitesi").entity.id == 9
        assert all(e.entity_id != 9 for e in old_index.institutions)

    def test_factory_uses_config_thresholds(self, catalog, config):
        """Test that the factory builds a working resolver from config."""
        resolver = create_entity_resolver(config, catalog)

        assert resolver.resolve_institution("metu").entity.id == 2


class TestResolutionMetadata:
    """Tests for ResolutionMetadata."""

    def test_confidence_is_lowest_resolved(self, resolver):
        """Test that metadata confidence is the minimum over resolved slots."""
        metadata = ResolutionMetadata("q", "q")
        metadata.add("institution", resolver.resolve_institution("odtu"))
        metadata.add("program", resolver.resolve_program("bilgisayr muhendisligi", 2))

        assert metadata.confidence() == metadata.slots[1].confidence
        assert metadata.confidence() < 1.0

    def test_confidence_without_resolved_slots(self, resolver):
        """Test that no resolved slot gives no confidence."""
        metadata = ResolutionMetadata("q", "q")
        metadata.add("institution", resolver.resolve_institution("qwerty"))

        assert metadata.confidence() is None

    def test_to_dict(self, resolver):
        """Test that metadata serializes its slots and carry-over."""
        metadata = ResolutionMetadata("ODTÜ", "odtu", carried_over=["program"])
        metadata.add("institution", resolver.resolve_institution("odtu"))

        data = metadata.to_dict()

        assert data["normalizedQuery"] == "odtu"
        assert data["slots"][0]["resolvedName"] == "Orta Doğu Teknik Üniversitesi"
        assert data["carriedOver"] == ["program"]
