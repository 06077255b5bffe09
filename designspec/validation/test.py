"""Unit tests for visual-usage validation."""

import pytest

from designspec.schema import parse_design_spec
from designspec.validation import (
    LAYOUT_ONLY_REASON,
    describe_visual_properties,
    has_visual_styling,
    is_card_like_container,
    is_input_like_container,
    is_surface_container,
    validate_visual_usage,
)


def _spec(*nodes):
    return parse_design_spec(
        {
            "page": "Test",
            "frame": {"name": "Test", "width": 390, "layout": "vertical", "gap": 16, "padding": 24},
            "nodes": list(nodes),
        }
    )


def _container(children, **styling):
    node = {"type": "container", "layout": "vertical", "gap": 8, "padding": 0, "children": children}
    node.update(styling)
    return node


def _text(content):
    return {"type": "text", "content": content}


class TestClassifiers:
    """Tests for the container classification helpers."""

    @pytest.mark.unit
    def test_zero_radius_is_not_styling(self):
        """borderRadius 0 alone does not count as styling."""
        spec = _spec(_container([_text("a")], borderRadius=0))
        assert not has_visual_styling(spec.nodes[0])

    @pytest.mark.unit
    def test_input_like_requires_border(self):
        """Placeholder text without a border is not input-like."""
        spec = _spec(_container([_text("Enter your email")], background="#FFFFFF"))
        assert not is_input_like_container(spec.nodes[0])

    @pytest.mark.unit
    def test_input_like_with_hint_text(self):
        """Border plus hint-like text is input-like, case-insensitively."""
        spec = _spec(
            _container([_text("Type a HINT here")], border={"color": "#D1D5DB", "width": 1})
        )
        assert is_input_like_container(spec.nodes[0])

    @pytest.mark.unit
    def test_input_like_ignores_nested_text(self):
        """Only direct children are inspected."""
        spec = _spec(
            _container(
                [_container([_text("Enter name")])],
                border={"color": "#D1D5DB", "width": 1},
            )
        )
        assert not is_input_like_container(spec.nodes[0])

    @pytest.mark.unit
    def test_card_like_by_padding(self):
        """Background, radius and padding of 16 make a card."""
        spec = _spec(_container([_text("a")], background="#FFFFFF", borderRadius=8, padding=16))
        assert is_card_like_container(spec.nodes[0])

    @pytest.mark.unit
    def test_card_like_by_children(self):
        """Small padding is enough with two or more children."""
        spec = _spec(
            _container([_text("a"), _text("b")], background="#FFFFFF", borderRadius=8, padding=4)
        )
        assert is_card_like_container(spec.nodes[0])

    @pytest.mark.unit
    def test_not_card_without_padding(self):
        """Zero padding never makes a card."""
        spec = _spec(
            _container([_text("a"), _text("b")], background="#FFFFFF", borderRadius=8, padding=0)
        )
        assert not is_card_like_container(spec.nodes[0])

    @pytest.mark.unit
    def test_describe_properties(self):
        """Properties are described in a fixed order."""
        spec = _spec(
            _container(
                [_text("a")],
                background="#F9FAFB",
                borderRadius=0,
                border={"color": "#000000", "width": 1},
            )
        )
        assert describe_visual_properties(spec.nodes[0]) == [
            'background="#F9FAFB"',
            "borderRadius=0",
            "border",
        ]

    @pytest.mark.unit
    def test_surface_requires_styling(self):
        """Cards and inputs are surfaces; unstyled or layout-only ones are not."""
        card = _spec(_container([_text("a")], background="#FFFFFF", borderRadius=8, padding=16))
        field = _spec(_container([_text("Enter email")], border={"color": "#D1D5DB", "width": 1}))
        plain = _spec(_container([_text("Enter email")], padding=16))
        layout_only = _spec(_container([_text("a")], background="#F9FAFB"))

        assert is_surface_container(card.nodes[0])
        assert is_surface_container(field.nodes[0])
        assert not is_surface_container(plain.nodes[0])
        assert not is_surface_container(layout_only.nodes[0])


class TestValidateVisualUsage:
    """Tests for validate_visual_usage."""

    @pytest.mark.unit
    def test_input_container_not_flagged(self):
        """Bordered container with placeholder text passes."""
        spec = _spec(
            _container([_text("Enter your email")], border={"color": "#D1D5DB", "width": 1})
        )
        assert validate_visual_usage(spec) == []

    @pytest.mark.unit
    def test_card_not_flagged(self):
        """A padded card with several children passes."""
        spec = _spec(
            _container(
                [_text("Title"), _text("Body"), {"type": "button", "label": "Go"}],
                background="#FFFFFF",
                borderRadius=12,
                padding=24,
            )
        )
        assert validate_visual_usage(spec) == []

    @pytest.mark.unit
    def test_layout_only_container_flagged(self):
        """Radius on an unpadded grouping container is flagged."""
        spec = _spec(_text("Header"), _container([_text("a"), _text("b")], borderRadius=12))
        warnings = validate_visual_usage(spec)

        assert len(warnings) == 1
        assert warnings[0].path == "nodes[1]"
        assert warnings[0].properties == ["borderRadius=12"]
        assert warnings[0].reason == LAYOUT_ONLY_REASON

    @pytest.mark.unit
    def test_unstyled_containers_ignored(self):
        """Plain grouping containers are fine."""
        spec = _spec(_container([_container([_text("a")])]))
        assert validate_visual_usage(spec) == []

    @pytest.mark.unit
    def test_recurses_below_flagged_container(self):
        """Children of a flagged container are still checked."""
        inner = _container([_text("x")], background="#F9FAFB")
        outer = _container([_text("a"), inner], background="#EEEEEE")
        warnings = validate_visual_usage(_spec(outer))

        assert [w.path for w in warnings] == ["nodes[0]", "nodes[0].children[1]"]
        assert warnings[1].properties == ['background="#F9FAFB"']

    @pytest.mark.unit
    def test_sample_spec_clean(self, sample_spec):
        """The shared login screen uses styling only on surfaces."""
        assert validate_visual_usage(sample_spec) == []

    @pytest.mark.unit
    def test_to_dict(self):
        """Warnings serialize to plain dicts."""
        warnings = validate_visual_usage(_spec(_container([_text("a")], background="#EEEEEE")))
        assert warnings[0].to_dict() == {
            "path": "nodes[0]",
            "properties": ['background="#EEEEEE"'],
            "reason": LAYOUT_ONLY_REASON,
        }
