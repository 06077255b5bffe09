"""PromptBuilder for rule-driven DesignSpec generation prompts.

Assembles the system directive from loaded rule documents and request
options, and provides the fixed assistant message describing the
DesignSpec JSON shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from designspec.schema import DEFAULT_GENERATION_CONTEXT, GenerationContext

if TYPE_CHECKING:
    from designspec.rules import LoadedRules, RuleLoader

HEADER_LINES: tuple[str, ...] = (
    "You are generating DesignSpecs for real application UIs, not raw layout primitives.",
    "",
    "Your goal is to produce layouts that resemble production-ready application screens at a wireframe+ level.",
    "",
    "Generated designs must look like real apps, not like ungrouped containers with text.",
    "",
    "ALWAYS apply the following rules:",
    "",
)

STRICT_LAYOUT_MARKER = "⚠️ STRICT LAYOUT MODE: These rules are MANDATORY:"

GROUP_ELEMENTS_LINES: tuple[str, ...] = (
    "- Group related elements in containers",
    "- Use logical grouping (e.g. form fields together)",
)
FORM_CONTAINER_LINES: tuple[str, ...] = (
    "- Wrap all form elements in a dedicated form container",
    "- Form containers must have clear padding and spacing",
    "- Form card container (the main form wrapper) should have visual styling (background, borderRadius)",
    "- Inner layout containers (field groups, actions containers) should NOT have visual styling",
)
HELPER_TEXT_LINES: tuple[str, ...] = (
    "- Include helper or hint text where appropriate",
    "- Helper text should be smaller and placed near relevant elements",
)
UX_FALLBACK_LINE = "- Follow standard UX practices"

FOOTER_LINES: tuple[str, ...] = (
    "=== OUTPUT FORMAT ===",
    "Your output must be a valid DesignSpec JSON only.",
    "No explanations.",
    "No markdown.",
)

ASSISTANT_PROMPT = """The DesignSpec JSON structure:

{
  "page": "string (page name)",
  "frame": {
    "name": "string (frame name)",
    "width": number (positive integer, typically 360-400 for mobile-first),
    "height": number (optional positive integer),
    "layout": "vertical" | "horizontal",
    "gap": number (non-negative integer, spacing between nodes, typically 12-16),
    "padding": number (non-negative integer, internal padding, typically 16-24),
    "background": "#RRGGBB" (optional),
    "borderRadius": number (optional),
    "border": { "color": "#RRGGBB", "width": number } (optional)
  },
  "nodes": [
    { "type": "text", "content": "string", "fontSize": number (optional, typically 14-20), "color": "#RRGGBB" (optional) },
    { "type": "button", "label": "string", "background": "#RRGGBB" (optional), "textColor": "#RRGGBB" (optional), "borderRadius": number (optional) },
    {
      "type": "container",
      "layout": "vertical" | "horizontal",
      "gap": number (spacing between children),
      "padding": number (internal padding),
      "children": [Node...] (non-empty array of child nodes, can be nested),
      "background": "#RRGGBB" (optional),
      "borderRadius": number (optional),
      "border": { "color": "#RRGGBB", "width": number } (optional)
    }
  ]
}

Example for a login form:
{
  "page": "Login",
  "frame": {
    "name": "Login Form",
    "width": 400,
    "layout": "vertical",
    "gap": 24,
    "padding": 24
  },
  "nodes": [
    { "type": "text", "content": "Login", "fontSize": 20 },
    {
      "type": "container",
      "layout": "vertical",
      "gap": 12,
      "padding": 16,
      "background": "#F9FAFB",
      "borderRadius": 12,
      "children": [
        { "type": "text", "content": "Email", "fontSize": 14 },
        {
          "type": "container",
          "layout": "horizontal",
          "gap": 0,
          "padding": 12,
          "border": { "color": "#D1D5DB", "width": 1 },
          "children": [{ "type": "text", "content": "Enter your email", "fontSize": 14 }]
        },
        { "type": "text", "content": "Password", "fontSize": 14 },
        {
          "type": "container",
          "layout": "horizontal",
          "gap": 0,
          "padding": 12,
          "border": { "color": "#D1D5DB", "width": 1 },
          "children": [{ "type": "text", "content": "Enter your password", "fontSize": 14 }]
        }
      ]
    },
    { "type": "button", "label": "Submit" }
  ]
}"""


@dataclass(frozen=True)
class PromptAssemblyOptions:
    """Inputs to prompt assembly.

    Attributes:
        user_prompt: The caller's natural-language request.
        target_layout: Device key (mobile, tablet, desktop).
        ui_strictness: Layout rule variant (strict, balanced).
        visual_baseline: Whether to include visual-baseline rules.
        strict_layout: Prefix layout rules with the mandatory marker.
        group_elements: Emit grouping guidance.
        form_container: Emit form-container guidance.
        helper_text: Emit helper-text guidance.
    """

    user_prompt: str
    target_layout: str = "mobile"
    ui_strictness: str = "strict"
    visual_baseline: bool = True
    strict_layout: bool = False
    group_elements: bool = True
    form_container: bool = True
    helper_text: bool = False

    @classmethod
    def from_request(
        cls, prompt: str, context: GenerationContext | None = None
    ) -> PromptAssemblyOptions:
        """Build options from a prompt and an optional generation context."""
        context = context or DEFAULT_GENERATION_CONTEXT
        return cls(
            user_prompt=prompt,
            target_layout=context.target_layout,
            ui_strictness=context.ui_strictness,
            visual_baseline=context.visual_baseline,
            strict_layout=context.strict_layout,
            group_elements=context.ux_patterns.group_elements,
            form_container=context.ux_patterns.form_container,
            helper_text=context.ux_patterns.helper_text,
        )


@dataclass
class PromptContext:
    """What went into an assembled prompt, for logging and analysis.

    Attributes:
        target_layout: Device section that was emitted.
        layout_variant: Which layout rule list was used.
        visual_baseline: Whether the baseline section was emitted.
        pattern_names: Matched pattern sections, in order.
        total_tokens_estimate: Rough token count estimate.
    """

    target_layout: str
    layout_variant: str = "default"
    visual_baseline: bool = False
    pattern_names: list[str] = field(default_factory=list)
    total_tokens_estimate: int = 0


def _bullets(rules: list[str]) -> list[str]:
    return [f"- {rule}" for rule in rules]


def select_layout_rules(options: PromptAssemblyOptions, rules: LoadedRules) -> tuple[str, list[str]]:
    """Pick the layout rule variant for the requested strictness.

    Returns:
        Tuple of (variant_name, rules). Falls back to the default list when
        the requested variant is absent.
    """
    layout = rules.layout
    if options.ui_strictness == "strict" and layout.strict_rules is not None:
        return "strict", layout.strict_rules
    if options.ui_strictness == "balanced" and layout.balanced_rules is not None:
        return "balanced", layout.balanced_rules
    return "default", layout.rules


def ux_pattern_lines(options: PromptAssemblyOptions) -> list[str]:
    """Guidance lines derived from the UX pattern toggles."""
    lines: list[str] = []
    if options.group_elements:
        lines.extend(GROUP_ELEMENTS_LINES)
    if options.form_container:
        lines.extend(FORM_CONTAINER_LINES)
    if options.helper_text:
        lines.extend(HELPER_TEXT_LINES)
    return lines or [UX_FALLBACK_LINE]


def assemble_system_prompt(options: PromptAssemblyOptions, rules: LoadedRules) -> str:
    """Compose the system directive.

    Pure function of its inputs. Section order is fixed: header, global,
    layout intent, device, visual baseline, patterns, UX patterns, output
    format.

    Args:
        options: Request options.
        rules: Rules loaded for the request.

    Returns:
        The directive text, lines joined with newlines.
    """
    lines: list[str] = list(HEADER_LINES)

    lines.append("=== GLOBAL RULES ===")
    lines.extend(_bullets(rules.base.rules))
    lines.append("")

    lines.append("=== LAYOUT INTENT RULES ===")
    _, layout_rules = select_layout_rules(options, rules)
    if options.strict_layout:
        lines.append(STRICT_LAYOUT_MARKER)
    lines.extend(_bullets(layout_rules))
    lines.append("")

    lines.append(f"=== DEVICE RULES ({options.target_layout.upper()}) ===")
    lines.extend(_bullets(rules.device.rules))
    lines.append("")

    if rules.visual_baseline is not None:
        lines.append("=== VISUAL BASELINE RULES ===")
        lines.extend(_bullets(rules.visual_baseline.rules))
        lines.append("")

    for pattern in rules.patterns:
        lines.append(f"=== PATTERN RULES: {pattern.name.upper()} ===")
        lines.extend(_bullets(pattern.rules))
        lines.append("")

    lines.append("=== UX PATTERNS ===")
    lines.extend(ux_pattern_lines(options))
    lines.append("")

    lines.extend(FOOTER_LINES)
    return "\n".join(lines)


def build_messages(
    system_prompt: str | None,
    user_prompt: str,
    assistant_prompt: str | None = ASSISTANT_PROMPT,
) -> list[dict[str, str]]:
    """Chat messages for the backend: system, fixed assistant, user.

    Empty system or assistant content is left out.
    """
    messages: list[dict[str, str]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    if assistant_prompt:
        messages.append({"role": "assistant", "content": assistant_prompt})
    messages.append({"role": "user", "content": user_prompt})
    return messages


class PromptBuilder:
    """Builds system prompts from rule documents.

    Example:
        >>> builder = PromptBuilder()
        >>> options = PromptAssemblyOptions.from_request("login form")
        >>> prompt = builder.build(options)
        >>> "=== PATTERN RULES: AUTH-FORM ===" in prompt
        True
    """

    def __init__(self, loader: RuleLoader | None = None):
        """Initialize PromptBuilder.

        Args:
            loader: Rule loader. Defaults to one using the process-wide cache.
        """
        if loader is None:
            from designspec.rules import RuleLoader

            loader = RuleLoader()
        self._loader = loader

    def build(self, options: PromptAssemblyOptions) -> str:
        """Load the applicable rules and assemble the system prompt."""
        prompt, _ = self.build_with_context(options)
        return prompt

    def build_with_context(self, options: PromptAssemblyOptions) -> tuple[str, PromptContext]:
        """Build the prompt and return what went into it.

        Raises:
            RuleLoadError: If a required rule document cannot be loaded.
        """
        rules = self._loader.load(
            options.user_prompt,
            options.target_layout,
            options.ui_strictness,
            options.visual_baseline,
        )
        prompt = assemble_system_prompt(options, rules)
        variant, _ = select_layout_rules(options, rules)
        context = PromptContext(
            target_layout=options.target_layout,
            layout_variant=variant,
            visual_baseline=rules.visual_baseline is not None,
            pattern_names=[p.name for p in rules.patterns],
            total_tokens_estimate=len(prompt) // 4,  # Rough estimate
        )
        return prompt, context


__all__ = [
    "ASSISTANT_PROMPT",
    "HEADER_LINES",
    "STRICT_LAYOUT_MARKER",
    "UX_FALLBACK_LINE",
    "PromptAssemblyOptions",
    "PromptContext",
    "PromptBuilder",
    "assemble_system_prompt",
    "build_messages",
    "select_layout_rules",
    "ux_pattern_lines",
]
