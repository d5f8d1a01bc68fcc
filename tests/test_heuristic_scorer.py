"""
Tests for HeuristicSpeciesScorer - colour cue weighting per category.
"""

import numpy as np
import pytest

from app.ml.feature_extractor import ColorProfile
from app.ml.heuristic_scorer import HeuristicSpeciesScorer, ScoreEntry
from app.models.enums import Category
from app.services.species_catalog import SpeciesCatalog


class TestHeuristicSpeciesScorer:
    """Test suite for HeuristicSpeciesScorer."""

    @pytest.fixture
    def scorer(self):
        """Scorer with a seeded generator."""
        return HeuristicSpeciesScorer(rng=np.random.default_rng(1234))

    @pytest.fixture
    def catalog(self):
        """Bundled Perth catalog: dugite, redback, bobtail, tiger snake, huntsman."""
        return SpeciesCatalog.load()

    @pytest.fixture
    def dark_red(self):
        return ColorProfile(r=120, g=20, b=20, average=53)

    @pytest.fixture
    def green(self):
        return ColorProfile(r=60, g=180, b=70, average=103)

    # === Category Bonuses ===

    def test_spider_dark_and_red(self, scorer, dark_red):
        """Dark, red-dominant images favour spiders on both cues."""
        assert scorer.category_bonus(dark_red, Category.SPIDER) == 6.0

    def test_spider_dark_only(self, scorer):
        """Dark image without red dominance earns only the dark bonus."""
        profile = ColorProfile(r=30, g=60, b=40, average=43)
        assert scorer.category_bonus(profile, Category.SPIDER) == 3.0

    def test_spider_bright_red(self, scorer):
        """Bright red image earns only the red bonus."""
        profile = ColorProfile(r=250, g=120, b=110, average=160)
        assert scorer.category_bonus(profile, Category.SPIDER) == 3.0

    def test_snake_brown_cue(self, scorer, dark_red, green):
        """Snakes gain when red exceeds blue."""
        assert scorer.category_bonus(dark_red, Category.SNAKE) == 2.0
        assert scorer.category_bonus(
            ColorProfile(r=50, g=50, b=90, average=63), Category.SNAKE
        ) == 0.0

    def test_lizard_green_cue(self, scorer, dark_red, green):
        """The 'other' bucket gains when green exceeds red."""
        assert scorer.category_bonus(green, Category.OTHER) == 2.0
        assert scorer.category_bonus(dark_red, Category.OTHER) == 0.0

    @pytest.mark.parametrize("category", [Category.INSECT, Category.MAMMAL, Category.BIRD])
    def test_other_categories_have_no_bonus(self, scorer, dark_red, green, category):
        """Categories without cues stay at the base weight."""
        assert scorer.category_bonus(dark_red, category) == 0.0
        assert scorer.category_bonus(green, category) == 0.0

    def test_neutral_profile_has_no_cues(self, scorer):
        """Mid-grey triggers no category cue."""
        neutral = ColorProfile(r=128, g=128, b=128, average=128)
        for category in Category:
            assert scorer.category_bonus(neutral, category) == 0.0

    # === Scoring ===

    def test_one_entry_per_species_in_order(self, scorer, catalog, green):
        """Entries follow catalog order and cover every species."""
        entries = scorer.score(green, catalog)

        assert [e.index for e in entries] == list(range(len(catalog)))
        assert all(isinstance(e, ScoreEntry) for e in entries)

    def test_weights_are_base_plus_bonus_plus_jitter(self, scorer, catalog, dark_red):
        """Jitter adds a value in [0, 1) on top of base and bonus."""
        for _ in range(50):
            entries = scorer.score(dark_red, catalog)
            for entry in entries:
                species = catalog[entry.index]
                fixed = scorer.BASE_WEIGHT + scorer.category_bonus(dark_red, species.category)
                assert fixed <= entry.weight < fixed + 1.0

    def test_dark_red_favours_spiders(self, scorer, catalog, dark_red):
        """Spiders outweigh every other species on a dark red image."""
        entries = scorer.score(dark_red, catalog)

        spider_min = min(
            e.weight for e in entries if catalog[e.index].category == Category.SPIDER
        )
        other_max = max(
            e.weight for e in entries if catalog[e.index].category != Category.SPIDER
        )
        assert spider_min > other_max

    def test_ties_broken_by_jitter(self, scorer, catalog):
        """Species with identical cues do not get identical weights."""
        neutral = ColorProfile(r=128, g=128, b=128, average=128)

        entries = scorer.score(neutral, catalog)

        assert len({e.weight for e in entries}) == len(entries)

    def test_empty_catalog(self, scorer, green):
        """No species, no entries."""
        assert scorer.score(green, []) == []
