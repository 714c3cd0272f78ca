"""Tests for platform resolution and suggestions."""

import pytest

from tag_intake.models.platform import PlatformDefinition
from tag_intake.resolution.catalog import PlatformCatalog, read_catalog_config
from tag_intake.resolution.resolver import PlatformResolver, ResolutionResult


@pytest.fixture
def twin_resolver() -> PlatformResolver:
    """Two platforms equally similar to "alpha", ranked 2 and 1."""
    catalog = PlatformCatalog.build([
        PlatformDefinition(id="alpha-one", name="Alpha One", priority=2),
        PlatformDefinition(id="alpha-two", name="Alpha Two", priority=1),
    ])
    return PlatformResolver(catalog, accept_threshold=0.8, min_suggestion_score=0.3)


class TestResolve:
    """Test PlatformResolver.resolve."""

    def test_alias_spellings_resolve_identically(self, resolver):
        """dv360, Display & Video 360 and DV360 are the same platform."""
        ids = {resolver.resolve(v).id for v in ("dv360", "Display & Video 360", "DV360")}
        assert ids == {"google-dv360"}

    def test_typo_resolves_fuzzily(self, resolver):
        assert resolver.resolve("trad desk").id == "trade-desk"

    def test_substring_resolves(self, resolver):
        assert resolver.resolve("trade").id == "trade-desk"

    def test_acceptance_is_strict(self, catalog):
        """A best score equal to the threshold is not accepted."""
        strict = PlatformResolver(catalog, accept_threshold=0.9)
        assert strict.resolve("trade") is None
        assert strict.resolve("trad desk") is None

    def test_unknown_text(self, resolver):
        assert resolver.resolve("zzzz") is None

    @pytest.mark.parametrize("raw", [None, "", "   ", "&&"])
    def test_empty_input(self, resolver, raw):
        assert resolver.resolve(raw) is None

    def test_inactive_platform_not_resolved(self, resolver):
        assert resolver.resolve("Facebook") is None

    def test_fuzzy_tie_broken_by_rank(self, twin_resolver):
        assert twin_resolver.resolve("alpha").id == "alpha-two"

    def test_exact_alias_beats_better_ranked_fuzzy_match(self):
        catalog = PlatformCatalog.build([
            PlatformDefinition(id="ranked", name="Trackers Hub", priority=1),
            PlatformDefinition(id="exact", name="Tracker", priority=9),
        ])
        resolver = PlatformResolver(catalog, accept_threshold=0.8)
        assert resolver.resolve("tracker").id == "exact"


class TestSuggest:
    """Test PlatformResolver.suggest."""

    def test_ranked_by_score(self, resolver):
        suggestions = resolver.suggest("tradedsk")
        assert suggestions[0].platform.id == "trade-desk"
        scores = [s.score for s in suggestions]
        assert scores == sorted(scores, reverse=True)

    def test_floor_is_strict(self, resolver):
        for raw in ("tradedsk", "amazn", "goog", "snapch"):
            assert all(s.score > 0.3 for s in resolver.suggest(raw))

    def test_limit(self, resolver):
        assert len(resolver.suggest("ads", limit=2)) <= 2
        assert len(resolver.suggest("ads")) <= 5

    def test_zero_limit(self, resolver, catalog):
        """A limit of 0 means no suggestions, not the default."""
        assert resolver.suggest("trad desk", limit=0) == []
        assert PlatformResolver(catalog, suggestion_limit=0).suggest("trad desk") == []
        assert len(PlatformResolver(catalog, suggestion_limit=1).suggest("ads")) == 1

    def test_nothing_similar(self, resolver):
        assert resolver.suggest("zzzz") == []

    def test_empty_input(self, resolver):
        assert resolver.suggest("") == []
        assert resolver.suggest(None) == []

    def test_inactive_never_suggested(self, resolver):
        assert all(s.platform.id != "meta" for s in resolver.suggest("facebook ads"))

    def test_ties_ordered_by_rank(self, twin_resolver):
        ids = [s.platform.id for s in twin_resolver.suggest("alpha")]
        assert ids == ["alpha-two", "alpha-one"]

    def test_to_dict(self, resolver):
        data = resolver.suggest("tradedsk")[0].to_dict()
        assert data["id"] == "trade-desk"
        assert data["name"] == "The Trade Desk"
        assert 0.8 < data["score"] < 0.9


class TestResolveOrSuggest:
    """Test the combined resolve-then-suggest lookup."""

    def test_resolved(self, resolver):
        result = resolver.resolve_or_suggest("GAM")
        assert result.resolved
        assert result.platform.id == "google-ad-manager"
        assert result.suggestions == ()

    def test_ambiguous(self, catalog):
        strict = PlatformResolver(catalog, accept_threshold=0.95, min_suggestion_score=0.3)
        result = strict.resolve_or_suggest("tradedsk")
        assert not result.resolved
        assert result.ambiguous
        assert result.suggestions[0].platform.id == "trade-desk"

    def test_platform_and_suggestions_exclusive(self, resolver, catalog):
        platform = catalog.get("xandr")
        suggestion = resolver.suggest("xandr")[0]
        with pytest.raises(ValueError):
            ResolutionResult(platform=platform, suggestions=(suggestion,))


class TestUpdatePlatforms:
    """Test hot catalog replacement."""

    def test_swaps_catalog(self, resolver):
        old_catalog = resolver.catalog
        new_catalog = resolver.update_platforms([
            PlatformDefinition(id="acme", name="Acme DSP", aliases=["Acme"], priority=1),
        ])

        assert resolver.catalog is new_catalog
        assert resolver.resolve("acme").id == "acme"
        assert resolver.resolve("dv360") is None
        # The previous catalog is untouched
        assert old_catalog.lookup_exact("dv360").id == "google-dv360"

    def test_persist(self, resolver, tmp_path):
        path = tmp_path / "platforms.json"
        resolver.update_platforms(
            [PlatformDefinition(id="acme", name="Acme DSP", priority=1)], persist_path=path
        )
        assert [d.id for d in read_catalog_config(path)] == ["acme"]
