"""Tests for rule loading and selection."""

import json

import pytest

from designspec.rules import (
    PACKAGED_RULES_DIR,
    PatternRuleSet,
    RuleCache,
    RuleLoader,
    RuleLoadError,
    discover_rules_dir,
    get_default_rule_cache,
    load_rules,
    matches_pattern,
    reset_rule_cache,
)


class TestMatchesPattern:
    """Tests for keyword detection."""

    @pytest.mark.unit
    def test_case_insensitive_substring(self):
        """Keywords match anywhere in the prompt, ignoring case."""
        pattern = PatternRuleSet(name="auth-form", detection_keywords=["Sign In"])
        assert matches_pattern("Build a SIGN IN screen", pattern)

    @pytest.mark.unit
    def test_no_keyword_present(self):
        """Prompts without any keyword do not match."""
        pattern = PatternRuleSet(name="auth-form", detection_keywords=["login"])
        assert not matches_pattern("A product dashboard", pattern)

    @pytest.mark.unit
    def test_missing_keywords_never_match(self):
        """Patterns without keywords never match."""
        assert not matches_pattern("login", PatternRuleSet(name="p"))
        assert not matches_pattern("login", PatternRuleSet(name="p", detection_keywords=[]))


class TestRuleLoader:
    """Tests for RuleLoader against an isolated directory."""

    @pytest.mark.unit
    def test_loads_required_documents(self, mock_rules_dir):
        """Base, layout and device rules are always loaded."""
        rules = RuleLoader(rules_dir=mock_rules_dir, cache=RuleCache()).load(
            "Create a form", "mobile", "strict", False
        )
        assert rules.base.rules == ["Rule 1", "Rule 2"]
        assert rules.layout.strict_rules == ["Strict rule 1", "Strict rule 2"]
        assert rules.layout.balanced_rules == ["Balanced rule 1"]
        assert rules.device.rules == ["Mobile rule 1"]
        assert rules.visual_baseline is None

    @pytest.mark.unit
    def test_tablet_selects_tablet_rules_only(self, mock_rules_dir):
        """Device selection is a direct lookup by target layout."""
        rules = RuleLoader(rules_dir=mock_rules_dir).load("x", "tablet", "strict", False)
        assert rules.device.rules == ["Tablet rule 1", "Tablet rule 2"]
        assert rules.device.width == "~768px"

    @pytest.mark.unit
    def test_visual_baseline_when_enabled(self, mock_rules_dir):
        """Visual baseline rules load only when the flag is set."""
        rules = RuleLoader(rules_dir=mock_rules_dir).load("x", "desktop", "balanced", True)
        assert rules.visual_baseline is not None
        assert rules.visual_baseline.rules == ["Baseline rule 1"]

    @pytest.mark.unit
    def test_pattern_included_on_keyword(self, mock_rules_dir):
        """Matching prompts include the pattern rules."""
        rules = RuleLoader(rules_dir=mock_rules_dir).load(
            "Create a LOGIN form", "mobile", "strict", False
        )
        assert [p.name for p in rules.patterns] == ["auth-form"]

    @pytest.mark.unit
    def test_pattern_excluded_without_keyword(self, mock_rules_dir):
        """Non-matching prompts load no patterns."""
        rules = RuleLoader(rules_dir=mock_rules_dir).load(
            "Create a dashboard", "mobile", "strict", False
        )
        assert rules.patterns == []

    @pytest.mark.unit
    def test_missing_pattern_file_skipped(self, mock_rules_dir_without_patterns):
        """Missing optional pattern files do not abort loading."""
        rules = RuleLoader(rules_dir=mock_rules_dir_without_patterns).load(
            "login", "mobile", "strict", False
        )
        assert rules.patterns == []
        assert rules.base.name == "base"

    @pytest.mark.unit
    def test_unreadable_pattern_file_skipped(self, mock_rules_dir):
        """Malformed pattern files are skipped like missing ones."""
        (mock_rules_dir / "patterns" / "auth-form.json").write_text("{not json")
        rules = RuleLoader(rules_dir=mock_rules_dir).load("login", "mobile", "strict", False)
        assert rules.patterns == []

    @pytest.mark.unit
    def test_unknown_pattern_name_skipped(self, mock_rules_dir):
        """Configured patterns without a file are ignored."""
        loader = RuleLoader(rules_dir=mock_rules_dir, pattern_names=("checkout", "auth-form"))
        rules = loader.load("password reset", "mobile", "strict", False)
        assert [p.name for p in rules.patterns] == ["auth-form"]

    @pytest.mark.unit
    @pytest.mark.parametrize("filename", ["base.json", "layout.json", "devices.json"])
    def test_missing_required_document_fails(self, mock_rules_dir, filename):
        """Missing required documents are a configuration error."""
        (mock_rules_dir / filename).unlink()
        with pytest.raises(RuleLoadError, match="file not found"):
            RuleLoader(rules_dir=mock_rules_dir).load("x", "mobile", "strict", False)

    @pytest.mark.unit
    def test_missing_visual_baseline_fails_when_enabled(self, mock_rules_dir):
        """The baseline document is required once requested."""
        (mock_rules_dir / "visual-baseline.json").unlink()
        loader = RuleLoader(rules_dir=mock_rules_dir)
        assert loader.load("x", "mobile", "strict", False).visual_baseline is None
        with pytest.raises(RuleLoadError):
            loader.load("x", "mobile", "strict", True)

    @pytest.mark.unit
    def test_invalid_required_document_fails(self, mock_rules_dir):
        """Required documents must match their model."""
        (mock_rules_dir / "devices.json").write_text(json.dumps({"name": "devices"}))
        with pytest.raises(RuleLoadError, match="invalid rule document"):
            RuleLoader(rules_dir=mock_rules_dir).load("x", "mobile", "strict", False)


class TestRuleCache:
    """Tests for document caching."""

    @pytest.mark.unit
    def test_documents_cached(self, mock_rules_dir):
        """Documents are read once and served from the cache."""
        cache = RuleCache()
        loader = RuleLoader(rules_dir=mock_rules_dir, cache=cache)
        loader.load("x", "mobile", "strict", False)
        (mock_rules_dir / "base.json").write_text(json.dumps({"name": "base", "rules": ["Changed"]}))

        assert loader.load("x", "mobile", "strict", False).base.rules == ["Rule 1", "Rule 2"]
        cache.clear()
        assert loader.load("x", "mobile", "strict", False).base.rules == ["Changed"]

    @pytest.mark.unit
    def test_injected_cache_is_isolated(self, mock_rules_dir):
        """An injected cache leaves the process-wide cache untouched."""
        cache = RuleCache()
        RuleLoader(rules_dir=mock_rules_dir, cache=cache).load("x", "mobile", "strict", False)
        assert len(cache) == 4
        assert len(get_default_rule_cache()) == 0

    @pytest.mark.unit
    def test_reset_default_cache(self):
        """Resetting replaces the process-wide cache."""
        first = get_default_rule_cache()
        reset_rule_cache()
        assert get_default_rule_cache() is not first


class TestDirectoryResolution:
    """Tests for rule directory resolution."""

    @pytest.mark.unit
    def test_env_override(self, mock_rules_dir, monkeypatch):
        """SPEC_RULES_DIR is used when no explicit directory is given."""
        monkeypatch.setenv("SPEC_RULES_DIR", str(mock_rules_dir))
        loader = RuleLoader()
        assert loader.rules_dir == mock_rules_dir
        assert load_rules("x", "tablet", "strict", False, loader=loader).device.rules == [
            "Tablet rule 1",
            "Tablet rule 2",
        ]

    @pytest.mark.unit
    def test_explicit_beats_env(self, mock_rules_dir, tmp_path, monkeypatch):
        """Constructor override takes priority over the environment."""
        monkeypatch.setenv("SPEC_RULES_DIR", str(tmp_path / "elsewhere"))
        assert RuleLoader(rules_dir=mock_rules_dir).rules_dir == mock_rules_dir

    @pytest.mark.unit
    def test_discovery_walks_upward(self, mock_rules_dir):
        """Upward search finds spec-rules/base.json in an ancestor."""
        nested = mock_rules_dir.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert discover_rules_dir(nested) == mock_rules_dir

    @pytest.mark.unit
    def test_discovery_falls_back_to_packaged(self, tmp_path):
        """Without a match the packaged rules are used."""
        start = tmp_path
        for part in "abcdefghijkl":
            start = start / part
        start.mkdir(parents=True)
        assert discover_rules_dir(start) == PACKAGED_RULES_DIR


class TestPackagedRules:
    """The shipped rule documents load and select correctly."""

    @pytest.mark.unit
    def test_packaged_documents_load(self):
        """Every packaged document validates."""
        loader = RuleLoader(rules_dir=PACKAGED_RULES_DIR, cache=RuleCache())
        rules = loader.load("Create a login form", "mobile", "strict", True)
        assert rules.base.rules
        assert rules.layout.strict_rules
        assert rules.layout.balanced_rules
        assert rules.visual_baseline is not None
        assert [p.name for p in rules.patterns] == ["auth-form"]
