"""Tests for PromptBuilder module."""

import pytest

from designspec.prompt import (
    ASSISTANT_PROMPT,
    HEADER_LINES,
    STRICT_LAYOUT_MARKER,
    UX_FALLBACK_LINE,
    PromptAssemblyOptions,
    PromptBuilder,
    assemble_system_prompt,
    build_messages,
)
from designspec.rules import (
    DeviceRuleSet,
    LayoutRuleSet,
    LoadedRules,
    PatternRuleSet,
    RuleCache,
    RuleLoader,
    RuleSet,
)
from designspec.schema import GenerationContext, UxPatterns


def _rules(
    strict_rules=("Strict rule 1", "Strict rule 2"),
    balanced_rules=("Balanced rule 1",),
    visual_baseline=False,
    patterns=(),
):
    return LoadedRules(
        base=RuleSet(name="base", rules=["Global 1", "Global 2"]),
        layout=LayoutRuleSet(
            name="layout",
            rules=["Default layout rule"],
            strict_rules=list(strict_rules) if strict_rules is not None else None,
            balanced_rules=list(balanced_rules) if balanced_rules is not None else None,
        ),
        device=DeviceRuleSet(width="~768px", height="900px", rules=["Device rule"]),
        visual_baseline=RuleSet(name="vb", rules=["Baseline rule"]) if visual_baseline else None,
        patterns=list(patterns),
    )


class TestPromptAssemblyOptions:
    """Tests for PromptAssemblyOptions."""

    @pytest.mark.unit
    def test_defaults_match_default_context(self):
        """from_request without context uses the default generation context."""
        options = PromptAssemblyOptions.from_request("login form")
        assert options == PromptAssemblyOptions(user_prompt="login form")

    @pytest.mark.unit
    def test_from_context(self):
        """Context fields map onto options."""
        context = GenerationContext(
            target_layout="desktop",
            ui_strictness="balanced",
            ux_patterns=UxPatterns(group_elements=False, form_container=False, helper_text=True),
            visual_baseline=False,
            strict_layout=True,
        )
        options = PromptAssemblyOptions.from_request("dashboard", context)
        assert options.target_layout == "desktop"
        assert options.ui_strictness == "balanced"
        assert options.visual_baseline is False
        assert options.strict_layout is True
        assert options.helper_text is True
        assert options.group_elements is False


class TestAssembleSystemPrompt:
    """Tests for the pure assembler."""

    @pytest.mark.unit
    def test_strict_uses_strict_rules_only(self):
        """Strict mode includes every strict line and no balanced line."""
        text = assemble_system_prompt(PromptAssemblyOptions(user_prompt="x"), _rules())
        assert "- Strict rule 1" in text
        assert "- Strict rule 2" in text
        assert "Balanced rule 1" not in text
        assert "Default layout rule" not in text

    @pytest.mark.unit
    def test_balanced_uses_balanced_rules(self):
        """Balanced mode uses the balanced variant."""
        options = PromptAssemblyOptions(user_prompt="x", ui_strictness="balanced")
        text = assemble_system_prompt(options, _rules())
        assert "- Balanced rule 1" in text
        assert "Strict rule" not in text

    @pytest.mark.unit
    def test_missing_variant_falls_back_to_default(self):
        """Without a strict variant the default rules are used."""
        text = assemble_system_prompt(
            PromptAssemblyOptions(user_prompt="x"), _rules(strict_rules=None)
        )
        assert "- Default layout rule" in text

    @pytest.mark.unit
    def test_strict_layout_marker_precedes_rules(self):
        """Strict layout mode prefixes the layout rules with the marker."""
        options = PromptAssemblyOptions(user_prompt="x", strict_layout=True)
        lines = assemble_system_prompt(options, _rules()).split("\n")
        index = lines.index("=== LAYOUT INTENT RULES ===")
        assert lines[index + 1] == STRICT_LAYOUT_MARKER
        assert lines[index + 2] == "- Strict rule 1"

    @pytest.mark.unit
    def test_marker_absent_by_default(self):
        """The mandatory marker only appears in strict layout mode."""
        text = assemble_system_prompt(PromptAssemblyOptions(user_prompt="x"), _rules())
        assert STRICT_LAYOUT_MARKER not in text

    @pytest.mark.unit
    def test_section_order(self):
        """Sections appear in the fixed order."""
        pattern = PatternRuleSet(name="auth-form", rules=["Auth rule"], detection_keywords=["login"])
        options = PromptAssemblyOptions(user_prompt="login", target_layout="tablet")
        text = assemble_system_prompt(options, _rules(visual_baseline=True, patterns=[pattern]))
        headings = [
            "=== GLOBAL RULES ===",
            "=== LAYOUT INTENT RULES ===",
            "=== DEVICE RULES (TABLET) ===",
            "=== VISUAL BASELINE RULES ===",
            "=== PATTERN RULES: AUTH-FORM ===",
            "=== UX PATTERNS ===",
            "=== OUTPUT FORMAT ===",
        ]
        positions = [text.index(h) for h in headings]
        assert positions == sorted(positions)

    @pytest.mark.unit
    def test_header_and_footer(self):
        """Fixed header opens and fixed footer closes the directive."""
        lines = assemble_system_prompt(PromptAssemblyOptions(user_prompt="x"), _rules()).split("\n")
        assert tuple(lines[: len(HEADER_LINES)]) == HEADER_LINES
        assert lines[-4:] == [
            "=== OUTPUT FORMAT ===",
            "Your output must be a valid DesignSpec JSON only.",
            "No explanations.",
            "No markdown.",
        ]

    @pytest.mark.unit
    def test_optional_sections_omitted(self):
        """Baseline and pattern sections are absent when not loaded."""
        text = assemble_system_prompt(PromptAssemblyOptions(user_prompt="x"), _rules())
        assert "VISUAL BASELINE" not in text
        assert "PATTERN RULES" not in text

    @pytest.mark.unit
    def test_ux_fallback_line(self):
        """With every UX toggle off the generic fallback is emitted."""
        options = PromptAssemblyOptions(
            user_prompt="x", group_elements=False, form_container=False, helper_text=False
        )
        lines = assemble_system_prompt(options, _rules()).split("\n")
        index = lines.index("=== UX PATTERNS ===")
        assert lines[index + 1] == UX_FALLBACK_LINE

    @pytest.mark.unit
    def test_ux_lines_follow_toggles(self):
        """UX guidance appears only for enabled toggles."""
        options = PromptAssemblyOptions(
            user_prompt="x", group_elements=False, form_container=True, helper_text=True
        )
        text = assemble_system_prompt(options, _rules())
        assert "- Group related elements in containers" not in text
        assert "- Wrap all form elements in a dedicated form container" in text
        assert "- Include helper or hint text where appropriate" in text
        assert UX_FALLBACK_LINE not in text

    @pytest.mark.unit
    def test_deterministic(self):
        """Same inputs give the same text."""
        options = PromptAssemblyOptions(user_prompt="x")
        rules = _rules(visual_baseline=True)
        assert assemble_system_prompt(options, rules) == assemble_system_prompt(options, rules)


class TestPromptBuilder:
    """Tests for PromptBuilder with a rule directory."""

    @pytest.mark.unit
    def test_build_with_context(self, mock_rules_dir):
        """Builder loads rules and reports what it included."""
        builder = PromptBuilder(RuleLoader(rules_dir=mock_rules_dir, cache=RuleCache()))
        options = PromptAssemblyOptions(user_prompt="Create a login form", target_layout="tablet")
        prompt, context = builder.build_with_context(options)

        assert "=== DEVICE RULES (TABLET) ===" in prompt
        assert "- Tablet rule 1" in prompt
        assert "- Mobile rule 1" not in prompt
        assert "- Auth rule 1" in prompt
        assert context.layout_variant == "strict"
        assert context.pattern_names == ["auth-form"]
        assert context.visual_baseline is True
        assert context.total_tokens_estimate > 0

    @pytest.mark.unit
    def test_build_packaged_rules(self):
        """Default builder works against the packaged rules."""
        prompt = PromptBuilder().build(PromptAssemblyOptions.from_request("Create a login form"))
        assert "=== DEVICE RULES (MOBILE) ===" in prompt
        assert "=== PATTERN RULES: AUTH-FORM ===" in prompt


class TestBuildMessages:
    """Tests for chat message construction."""

    @pytest.mark.unit
    def test_message_roles(self):
        """System, assistant and user messages in order."""
        messages = build_messages("SYSTEM", "Create a login form")
        assert [m["role"] for m in messages] == ["system", "assistant", "user"]
        assert messages[0]["content"] == "SYSTEM"
        assert messages[1]["content"] == ASSISTANT_PROMPT
        assert messages[2]["content"] == "Create a login form"

    @pytest.mark.unit
    def test_optional_messages_skipped(self):
        """Missing system and assistant content is left out."""
        messages = build_messages(None, "hello", assistant_prompt=None)
        assert messages == [{"role": "user", "content": "hello"}]

    @pytest.mark.unit
    def test_assistant_prompt_has_example(self):
        """The assistant message describes the shape and a worked example."""
        assert "The DesignSpec JSON structure" in ASSISTANT_PROMPT
        assert "Example for a login form" in ASSISTANT_PROMPT
