"""Tests for the repair pipeline."""

import pytest

from designspec.schema import (
    ContainerNode,
    GenerationContext,
    UxPatterns,
    parse_design_spec,
    serialize_design_spec,
)

from .lib import (
    BUTTON_BACKGROUND,
    CONTAINER_BACKGROUND,
    INPUT_BORDER,
    PLACEHOLDER_TEXTS,
    TEXT_PLACEHOLDER_COLOR,
    TEXT_PRIMARY_COLOR,
    apply_visual_defaults,
    repair_empty_text,
    run_repair_pipeline,
)


def _spec(*nodes, **frame):
    frame_data = {"name": "Test", "width": 390, "layout": "vertical", "gap": 16, "padding": 24}
    frame_data.update(frame)
    return parse_design_spec({"page": "Test", "frame": frame_data, "nodes": list(nodes)})


def _text(content, **extra):
    return {"type": "text", "content": content, **extra}


def _container(children, padding=0, **extra):
    return {
        "type": "container",
        "layout": "vertical",
        "gap": 8,
        "padding": padding,
        "children": children,
        **extra,
    }


def _context(target_layout="mobile"):
    return GenerationContext(
        target_layout=target_layout,
        ui_strictness="strict",
        ux_patterns=UxPatterns(group_elements=True, form_container=True, helper_text=False),
    )


class TestRepairEmptyText:
    """Tests for repair_empty_text."""

    @pytest.mark.unit
    def test_placeholders_cycle_across_tree(self):
        """One counter is shared over the whole tree and wraps around."""
        spec = _spec(
            _text(""),
            _container([_text(" "), _text("ok"), _text("")]),
            _text("\n"),
            _text(""),
        )
        repaired = repair_empty_text(spec)

        assert repaired.nodes[0].content == "Label"
        assert [c.content for c in repaired.nodes[1].children] == ["Text", "ok", "Description"]
        assert repaired.nodes[2].content == "Value"
        assert repaired.nodes[3].content == PLACEHOLDER_TEXTS[0]

    @pytest.mark.unit
    def test_input_unchanged(self):
        """The input spec is not modified."""
        spec = _spec(_text(""))
        repair_empty_text(spec)
        assert spec.nodes[0].content == ""

    @pytest.mark.unit
    def test_no_empty_text_after_repair(self):
        """No text node is left empty."""
        spec = _spec(_container([_container([_text("   ")])]), _text(""))
        repaired = repair_empty_text(spec)
        texts = [repaired.nodes[0].children[0].children[0], repaired.nodes[1]]
        assert all(t.content.strip() for t in texts)

    @pytest.mark.unit
    def test_idempotent(self):
        """Repairing a repaired tree changes nothing."""
        spec = _spec(
            _text(""),
            _container([_text("  "), _container([_text(""), _text("keep")])]),
            _text("\t"),
        )
        once = repair_empty_text(spec)
        twice = repair_empty_text(once)

        assert serialize_design_spec(twice) == serialize_design_spec(once)


class TestApplyVisualDefaults:
    """Tests for apply_visual_defaults."""

    @pytest.mark.unit
    def test_frame_defaults_by_layout(self):
        """Frame height follows the device class."""
        spec = _spec(_text("a"))
        assert apply_visual_defaults(spec, "mobile").frame.height == 800
        assert apply_visual_defaults(spec, "tablet").frame.height == 900
        assert apply_visual_defaults(spec, "desktop").frame.height == 900

        frame = apply_visual_defaults(spec).frame
        assert frame.background == "#FFFFFF"
        assert frame.border_radius == 0

    @pytest.mark.unit
    def test_frame_values_kept(self):
        """Explicit frame attributes are never overwritten."""
        spec = _spec(_text("a"), height=640, background="#000000")
        frame = apply_visual_defaults(spec, "desktop").frame
        assert frame.height == 640
        assert frame.background == "#000000"

    @pytest.mark.unit
    def test_text_colors(self):
        """Placeholder-like text gets the muted tint."""
        spec = _spec(
            _text("Enter your name"),
            _text("Helper: at least 8 characters"),
            _text("Welcome"),
            _text("Custom", color="#FF0000"),
        )
        colors = [n.color for n in apply_visual_defaults(spec).nodes]
        assert colors == [
            TEXT_PLACEHOLDER_COLOR,
            TEXT_PLACEHOLDER_COLOR,
            TEXT_PRIMARY_COLOR,
            "#FF0000",
        ]

    @pytest.mark.unit
    def test_button_defaults(self):
        """Buttons get brand colours and radius unless already set."""
        spec = _spec({"type": "button", "label": "Go"}, {"type": "button", "label": "Stop", "borderRadius": 0})
        first, second = apply_visual_defaults(spec).nodes
        assert first.background == BUTTON_BACKGROUND
        assert first.text_color == "#FFFFFF"
        assert first.border_radius == 8
        assert second.border_radius == 0

    @pytest.mark.unit
    def test_input_like_container(self):
        """Containers with entry text get a border and no radius."""
        node = apply_visual_defaults(_spec(_container([_text("Enter email")]))).nodes[0]
        assert node.border == INPUT_BORDER
        assert node.background == "#FFFFFF"
        assert node.border_radius is None

    @pytest.mark.unit
    def test_bordered_container_is_input_like(self):
        """An existing border keeps the container on the input path."""
        spec = _spec(_container([_text("Name")], border={"color": "#000000", "width": 2}))
        node = apply_visual_defaults(spec).nodes[0]
        assert node.border.color == "#000000"
        assert node.background == "#FFFFFF"
        assert node.border_radius is None

    @pytest.mark.unit
    def test_plain_container(self):
        """Other containers get the neutral surface fill and radius."""
        node = apply_visual_defaults(_spec(_container([_text("Title")]))).nodes[0]
        assert node.background == CONTAINER_BACKGROUND
        assert node.border_radius == 12
        assert node.border is None

    @pytest.mark.unit
    def test_recurses_into_children(self):
        """Every nested node receives defaults."""
        spec = _spec(_container([_container([{"type": "button", "label": "Deep"}])]))
        inner = apply_visual_defaults(spec).nodes[0].children[0]
        assert isinstance(inner, ContainerNode)
        assert inner.background == CONTAINER_BACKGROUND
        assert inner.children[0].background == BUTTON_BACKGROUND

    @pytest.mark.unit
    def test_idempotent(self, sample_spec):
        """A second application changes nothing."""
        once = apply_visual_defaults(sample_spec, "tablet")
        twice = apply_visual_defaults(once, "tablet")
        assert serialize_design_spec(once) == serialize_design_spec(twice)

    @pytest.mark.unit
    def test_sample_spec(self, sample_spec):
        """Existing card styling is kept; the input gets a background."""
        repaired = apply_visual_defaults(sample_spec)
        card = repaired.nodes[1]
        assert card.background == "#FFFFFF"
        assert card.border_radius == 12

        input_box = card.children[1]
        assert input_box.border.color == "#D1D5DB"
        assert input_box.background == "#FFFFFF"
        assert input_box.children[0].color == TEXT_PLACEHOLDER_COLOR


class TestRunRepairPipeline:
    """Tests for the full pipeline."""

    @pytest.mark.unit
    def test_login_screen_without_warnings(self):
        """A typical form repairs cleanly."""
        spec = _spec(
            _text("Sign in"),
            _container(
                [
                    _text("Email"),
                    _container(
                        [_text("Enter your email")],
                        padding=12,
                        border={"color": "#E5E7EB", "width": 1},
                    ),
                    _text("  "),
                ],
                padding=24,
            ),
            {"type": "button", "label": "Log In"},
        )
        result = run_repair_pipeline(spec, _context())

        assert result.warnings == []
        assert result.spec.frame.height == 800
        assert result.spec.nodes[1].children[2].content == "Label"
        assert result.spec.nodes[2].background == BUTTON_BACKGROUND

    @pytest.mark.unit
    def test_classification_sees_defaults(self):
        """Defaults filled on a thin wrapper are reported afterwards."""
        result = run_repair_pipeline(_spec(_container([_text("a")])), _context("desktop"))

        assert result.spec.frame.height == 900
        assert len(result.warnings) == 1
        assert result.warnings[0].path == "nodes[0]"
        assert result.warnings[0].properties == [
            f'background="{CONTAINER_BACKGROUND}"',
            "borderRadius=12",
        ]

    @pytest.mark.unit
    def test_default_context(self, sample_spec):
        """Without a context the mobile defaults apply."""
        assert run_repair_pipeline(sample_spec).spec.frame.height == 800
