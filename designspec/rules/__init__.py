"""Rule documents for prompt assembly.

Example:
    >>> from designspec.rules import load_rules
    >>> rules = load_rules("Create a login form", "tablet", "strict", True)
    >>> rules.device.width
    '~768px'
"""

from .lib import (
    DEFAULT_PATTERN_NAMES,
    PACKAGED_RULES_DIR,
    RULES_DIRNAME,
    DeviceRuleSet,
    DevicesDocument,
    LayoutRuleSet,
    LoadedRules,
    PatternRuleSet,
    RuleCache,
    RuleLoader,
    RuleLoadError,
    RuleSet,
    discover_rules_dir,
    get_default_rule_cache,
    load_rules,
    matches_pattern,
    reset_rule_cache,
)

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
