"""Rule document loading and selection.

Rule documents are static JSON files in a ``spec-rules`` directory:

    spec-rules/
        base.json              global rules (required)
        layout.json            layout intent, strict/balanced variants (required)
        devices.json           mobile/tablet/desktop rules (required)
        visual-baseline.json   minimum styling (loaded when enabled)
        patterns/<name>.json   keyword-detected patterns (optional)

Parsed documents are cached per process in a ``RuleCache``. Documents are
immutable once deployed, so concurrent population is harmless.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from designspec.config import get_rules_dir
from designspec.schema import TargetLayout

logger = logging.getLogger(__name__)

RULES_DIRNAME = "spec-rules"
MAX_SEARCH_DEPTH = 10
DEFAULT_PATTERN_NAMES: tuple[str, ...] = ("auth-form",)
PACKAGED_RULES_DIR = Path(__file__).parent / RULES_DIRNAME


# =============================================================================
# Errors
# =============================================================================


class RuleLoadError(RuntimeError):
    """A required rule document is missing, unreadable or malformed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load rule document {path}: {reason}")


# =============================================================================
# Rule Document Models
# =============================================================================


_RULE_MODEL_CONFIG = {"populate_by_name": True, "frozen": True}


class RuleSet(BaseModel):
    """A named list of rule lines."""

    name: str
    description: str = ""
    rules: list[str] = Field(default_factory=list)

    model_config = _RULE_MODEL_CONFIG


class LayoutRuleSet(RuleSet):
    """Layout intent rules with optional strictness variants."""

    strict_rules: list[str] | None = Field(default=None, alias="strictRules")
    balanced_rules: list[str] | None = Field(default=None, alias="balancedRules")


class DeviceRuleSet(BaseModel):
    """Rules for one device class. Sizes are descriptive strings."""

    width: str
    height: str
    rules: list[str] = Field(default_factory=list)

    model_config = _RULE_MODEL_CONFIG


class DevicesDocument(BaseModel):
    """The devices.json document, one rule set per target layout."""

    name: str
    description: str = ""
    mobile: DeviceRuleSet
    tablet: DeviceRuleSet
    desktop: DeviceRuleSet

    model_config = _RULE_MODEL_CONFIG

    def for_layout(self, target_layout: TargetLayout | str) -> DeviceRuleSet:
        return getattr(self, TargetLayout(target_layout).value)


class PatternRuleSet(RuleSet):
    """Pattern rules included when the prompt mentions a detection keyword."""

    detection_keywords: list[str] | None = Field(
        default=None, alias="detectionKeywords"
    )


class LoadedRules(BaseModel):
    """The rule subset applicable to one request."""

    base: RuleSet
    layout: LayoutRuleSet
    device: DeviceRuleSet
    visual_baseline: RuleSet | None = None
    patterns: list[PatternRuleSet] = Field(default_factory=list)

    model_config = _RULE_MODEL_CONFIG


# =============================================================================
# Cache
# =============================================================================


class RuleCache:
    """Per-process store of the resolved directory and parsed documents.

    Example:
        >>> cache = RuleCache()
        >>> loader = RuleLoader(cache=cache)
        >>> cache.clear()  # force re-reading from disk
    """

    def __init__(self):
        self.rules_dir: Path | None = None
        self._documents: dict[Path, Any] = {}

    def get(self, path: Path) -> Any | None:
        return self._documents.get(path)

    def put(self, path: Path, document: Any) -> None:
        self._documents[path] = document

    def __contains__(self, path: Path) -> bool:
        return path in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def clear(self) -> None:
        """Forget the resolved directory and every cached document."""
        self.rules_dir = None
        self._documents.clear()


_default_cache: RuleCache | None = None


def get_default_rule_cache() -> RuleCache:
    """Get the process-wide cache, creating it on first use."""
    global _default_cache
    if _default_cache is None:
        _default_cache = RuleCache()
    return _default_cache


def reset_rule_cache() -> None:
    """Drop the process-wide cache (test isolation, rule redeploys)."""
    global _default_cache
    _default_cache = None


# =============================================================================
# Directory Resolution
# =============================================================================


def discover_rules_dir(start: Path | None = None) -> Path:
    """Search upward for a ``spec-rules/base.json``.

    Args:
        start: Directory to start from. Defaults to this package.

    Returns:
        The first matching ``spec-rules`` directory, or the packaged
        default when none is found within the search depth.
    """
    current = (start or Path(__file__).parent).resolve()

    for _ in range(MAX_SEARCH_DEPTH):
        candidate = current / RULES_DIRNAME
        if (candidate / "base.json").is_file():
            return candidate
        if current.parent == current:
            break
        current = current.parent

    return PACKAGED_RULES_DIR


def matches_pattern(prompt: str, pattern: PatternRuleSet) -> bool:
    """Check whether the prompt mentions any of the pattern's keywords.

    Matching is a case-insensitive substring test. Patterns without
    keywords never match.
    """
    if not pattern.detection_keywords:
        return False
    lower_prompt = prompt.lower()
    return any(keyword.lower() in lower_prompt for keyword in pattern.detection_keywords)


# =============================================================================
# Loader
# =============================================================================


class RuleLoader:
    """Loads rule documents and selects the subset for a request.

    Example:
        >>> loader = RuleLoader(rules_dir="spec-rules")
        >>> rules = loader.load("Create a login form", "mobile", "strict", True)
        >>> [p.name for p in rules.patterns]
        ['auth-form']
    """

    def __init__(
        self,
        rules_dir: Path | str | None = None,
        cache: RuleCache | None = None,
        pattern_names: tuple[str, ...] = DEFAULT_PATTERN_NAMES,
    ):
        """Initialize RuleLoader.

        Args:
            rules_dir: Explicit rule directory. Falls back to SPEC_RULES_DIR,
                then upward discovery.
            cache: Document cache. Defaults to the process-wide cache.
            pattern_names: Pattern documents to consider, relative to
                ``patterns/`` and without the ``.json`` suffix.
        """
        self._rules_dir = Path(rules_dir) if rules_dir is not None else None
        self._cache = cache
        self.pattern_names = pattern_names

    @property
    def cache(self) -> RuleCache:
        return self._cache if self._cache is not None else get_default_rule_cache()

    @property
    def rules_dir(self) -> Path:
        """Resolved rule directory (explicit > environment > discovery)."""
        if self._rules_dir is not None:
            return self._rules_dir

        cache = self.cache
        if cache.rules_dir is None:
            configured = get_rules_dir()
            cache.rules_dir = configured if configured is not None else discover_rules_dir()
            logger.debug(f"Resolved rule directory: {cache.rules_dir}")
        return cache.rules_dir

    def _read(self, filename: str, model: type[BaseModel]) -> Any:
        path = self.rules_dir / filename
        cached = self.cache.get(path)
        if cached is not None:
            return cached

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise RuleLoadError(path, "file not found") from e
        except OSError as e:
            raise RuleLoadError(path, str(e)) from e
        except json.JSONDecodeError as e:
            raise RuleLoadError(path, f"invalid JSON: {e}") from e

        try:
            document = model.model_validate(raw)
        except PydanticValidationError as e:
            raise RuleLoadError(path, f"invalid rule document: {e}") from e

        self.cache.put(path, document)
        return document

    def load_base(self) -> RuleSet:
        return self._read("base.json", RuleSet)

    def load_layout(self) -> LayoutRuleSet:
        return self._read("layout.json", LayoutRuleSet)

    def load_devices(self) -> DevicesDocument:
        return self._read("devices.json", DevicesDocument)

    def load_visual_baseline(self) -> RuleSet:
        return self._read("visual-baseline.json", RuleSet)

    def load_patterns(self) -> list[PatternRuleSet]:
        """Load every configured pattern, skipping missing or broken files."""
        patterns: list[PatternRuleSet] = []
        for name in self.pattern_names:
            try:
                patterns.append(self._read(f"patterns/{name}.json", PatternRuleSet))
            except RuleLoadError as e:
                logger.debug(f"Skipping pattern '{name}': {e.reason}")
        return patterns

    def load(
        self,
        user_prompt: str,
        target_layout: TargetLayout | str,
        ui_strictness: str,
        visual_baseline: bool,
    ) -> LoadedRules:
        """Load the rules applicable to a request.

        Args:
            user_prompt: Prompt used for pattern detection.
            target_layout: Device key selecting the device rule set.
            ui_strictness: Carried for symmetry with the assembler, which
                picks the layout variant.
            visual_baseline: Whether to include the visual-baseline rules.

        Returns:
            LoadedRules for the request.

        Raises:
            RuleLoadError: If a required document cannot be loaded.
        """
        base = self.load_base()
        layout = self.load_layout()
        device = self.load_devices().for_layout(target_layout)
        baseline = self.load_visual_baseline() if visual_baseline else None
        patterns = [p for p in self.load_patterns() if matches_pattern(user_prompt, p)]

        return LoadedRules(
            base=base,
            layout=layout,
            device=device,
            visual_baseline=baseline,
            patterns=patterns,
        )


def load_rules(
    user_prompt: str,
    target_layout: TargetLayout | str,
    ui_strictness: str,
    visual_baseline: bool,
    *,
    loader: RuleLoader | None = None,
) -> LoadedRules:
    """Load applicable rules with the given (or a default) loader."""
    loader = loader or RuleLoader()
    return loader.load(user_prompt, target_layout, ui_strictness, visual_baseline)


__all__ = [
    "RULES_DIRNAME",
    "PACKAGED_RULES_DIR",
    "DEFAULT_PATTERN_NAMES",
    "RuleLoadError",
    "RuleSet",
    "LayoutRuleSet",
    "DeviceRuleSet",
    "DevicesDocument",
    "PatternRuleSet",
    "LoadedRules",
    "RuleCache",
    "get_default_rule_cache",
    "reset_rule_cache",
    "discover_rules_dir",
    "matches_pattern",
    "RuleLoader",
    "load_rules",
]
