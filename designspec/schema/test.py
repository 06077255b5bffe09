"""Unit tests for the Schema module."""

import copy

import pytest
from pydantic import ValidationError as PydanticValidationError

from designspec.schema import (
    DEFAULT_GENERATION_CONTEXT,
    ButtonNode,
    ContainerNode,
    DesignSpec,
    RequestValidationError,
    SpecValidationError,
    TextNode,
    export_json_schema,
    format_error_path,
    is_valid_design_spec,
    iter_nodes,
    parse_design_spec,
    parse_prompt_request,
    serialize_design_spec,
    validate_design_spec,
)


def _minimal(nodes=None, **frame_overrides):
    frame = {"name": "Main", "width": 400, "layout": "vertical", "gap": 16, "padding": 24}
    frame.update(frame_overrides)
    return {
        "page": "Home",
        "frame": frame,
        "nodes": nodes if nodes is not None else [{"type": "text", "content": "Hi"}],
    }


class TestValidateDesignSpec:
    """Tests for structural validation."""

    @pytest.mark.unit
    def test_valid_text_and_button(self):
        """Text and button nodes validate."""
        result = validate_design_spec(
            _minimal(
                [
                    {"type": "text", "content": "Welcome"},
                    {"type": "button", "label": "Get Started"},
                ]
            )
        )
        assert result.ok
        assert isinstance(result.spec.nodes[0], TextNode)
        assert isinstance(result.spec.nodes[1], ButtonNode)
        assert result.issues == []

    @pytest.mark.unit
    def test_nested_containers(self, sample_spec_dict):
        """Containers recurse to arbitrary depth."""
        result = validate_design_spec(sample_spec_dict)
        assert result.ok
        card = result.spec.nodes[1]
        assert isinstance(card, ContainerNode)
        assert isinstance(card.children[1], ContainerNode)

    @pytest.mark.unit
    def test_empty_nodes_rejected(self):
        """DesignSpec requires at least one node."""
        result = validate_design_spec(_minimal([]))
        assert not result.ok
        assert [i.path for i in result.issues] == ["nodes"]

    @pytest.mark.unit
    def test_empty_children_rejected_at_depth(self):
        """The one-child minimum applies to nested containers too."""
        inner = {"type": "container", "layout": "vertical", "gap": 0, "padding": 0, "children": []}
        outer = {
            "type": "container",
            "layout": "vertical",
            "gap": 0,
            "padding": 0,
            "children": [inner],
        }
        result = validate_design_spec(_minimal([outer]))
        assert not result.ok
        assert result.issues[0].path == "nodes[0].children[0].children"

    @pytest.mark.unit
    def test_unknown_tag_rejected(self):
        """Unknown node types fail."""
        result = validate_design_spec(_minimal([{"type": "image", "src": "x.png"}]))
        assert not result.ok
        assert result.issues[0].path == "nodes[0]"

    @pytest.mark.unit
    def test_missing_tag_rejected(self):
        """Nodes without a type tag fail."""
        result = validate_design_spec(_minimal([{"content": "Hi"}]))
        assert not result.ok

    @pytest.mark.unit
    def test_accumulates_all_issues(self):
        """Every violation is reported, not only the first."""
        value = _minimal([{"type": "button", "label": ""}], width=0, gap=-4)
        result = validate_design_spec(value)
        paths = {i.path for i in result.issues}
        assert paths == {"frame.width", "frame.gap", "nodes[0].label"}

    @pytest.mark.unit
    def test_nested_numeric_path(self):
        """Nested errors use index notation without union tags."""
        value = _minimal(
            [
                {
                    "type": "container",
                    "layout": "vertical",
                    "gap": 0,
                    "padding": 0,
                    "children": [
                        {"type": "text", "content": "a"},
                        {"type": "text", "content": "b", "fontSize": 0},
                    ],
                }
            ]
        )
        result = validate_design_spec(value)
        assert [i.path for i in result.issues] == ["nodes[0].children[1].fontSize"]

    @pytest.mark.unit
    def test_booleans_are_not_integers(self):
        """Strict integers reject booleans and numeric strings."""
        assert not is_valid_design_spec(_minimal(width=True))
        assert not is_valid_design_spec(_minimal(width="400"))

    @pytest.mark.unit
    def test_integral_floats_are_integers(self):
        """JSON numbers like 400.0 pass and come back as ints."""
        value = _minimal(
            nodes=[{"type": "text", "content": "Hi", "fontSize": 14.0}],
            width=400.0,
        )
        result = validate_design_spec(value)

        assert result.ok
        assert result.spec.frame.width == 400
        assert isinstance(result.spec.frame.width, int)
        assert serialize_design_spec(result.spec)["nodes"][0]["fontSize"] == 14

    @pytest.mark.unit
    def test_fractional_floats_rejected(self):
        """Non-integral numbers still fail, with the field path."""
        result = validate_design_spec(_minimal(width=400.5))
        assert not result.ok
        assert [i.path for i in result.issues] == ["frame.width"]
        assert not is_valid_design_spec(_minimal(gap=True))

    @pytest.mark.unit
    @pytest.mark.parametrize("color", ["#FFF", "#2563EB", "#2563EB80"])
    def test_hex_colors_accepted(self, color):
        """Short, long and alpha hex colours are valid."""
        assert is_valid_design_spec(_minimal(background=color))

    @pytest.mark.unit
    @pytest.mark.parametrize("color", ["red", "#GGGGGG", "2563EB", "#12345"])
    def test_invalid_hex_rejected(self, color):
        """Non-hex colours fail."""
        assert not is_valid_design_spec(_minimal(background=color))

    @pytest.mark.unit
    def test_negative_border_width_rejected(self):
        """Border width must be non-negative."""
        value = _minimal(border={"color": "#000000", "width": -1})
        result = validate_design_spec(value)
        assert [i.path for i in result.issues] == ["frame.border.width"]

    @pytest.mark.unit
    def test_non_dict_input_does_not_raise(self):
        """Arbitrary JSON values produce issues instead of exceptions."""
        for value in (None, [], "spec", 3):
            assert not validate_design_spec(value).ok

    @pytest.mark.unit
    def test_unknown_keys_ignored(self):
        """Extra keys are dropped rather than rejected."""
        value = _minimal()
        value["version"] = 2
        assert is_valid_design_spec(value)


class TestParseAndSerialize:
    """Tests for the raising parser and serializer."""

    @pytest.mark.unit
    def test_parse_raises_with_issues(self):
        """parse_design_spec raises SpecValidationError."""
        with pytest.raises(SpecValidationError, match="Invalid DesignSpec") as exc_info:
            parse_design_spec(_minimal([]))
        assert exc_info.value.issues[0].path == "nodes"

    @pytest.mark.unit
    def test_round_trip(self, sample_spec_dict):
        """validate(serialize(spec)) yields equal data."""
        spec = parse_design_spec(sample_spec_dict)
        dumped = serialize_design_spec(spec)
        assert dumped == sample_spec_dict
        assert parse_design_spec(dumped) == spec

    @pytest.mark.unit
    def test_serialize_omits_unset_optionals(self):
        """Unset optional attributes do not appear on the wire."""
        spec = parse_design_spec(_minimal())
        dumped = serialize_design_spec(spec)
        assert "height" not in dumped["frame"]
        assert dumped["nodes"][0] == {"type": "text", "content": "Hi"}

    @pytest.mark.unit
    def test_snake_case_construction(self):
        """Models accept Python field names and dump camelCase."""
        node = ButtonNode(label="Go", text_color="#FFFFFF", border_radius=8)
        dumped = node.model_dump(by_alias=True, exclude_none=True)
        assert dumped == {"type": "button", "label": "Go", "textColor": "#FFFFFF", "borderRadius": 8}

    @pytest.mark.unit
    def test_models_are_frozen(self, sample_spec):
        """Validated specs cannot be mutated in place."""
        with pytest.raises(PydanticValidationError):
            sample_spec.page = "Other"

    @pytest.mark.unit
    def test_parse_does_not_mutate_input(self, sample_spec_dict):
        """Parsing leaves the source dict untouched."""
        original = copy.deepcopy(sample_spec_dict)
        parse_design_spec(sample_spec_dict)
        assert sample_spec_dict == original


class TestPromptRequest:
    """Tests for inbound request validation."""

    @pytest.mark.unit
    def test_prompt_only(self):
        """A bare prompt resolves to the default context."""
        request = parse_prompt_request({"prompt": "Create a login form"})
        assert request.generation_context is None
        assert request.resolved_context() == DEFAULT_GENERATION_CONTEXT

    @pytest.mark.unit
    def test_with_context(self):
        """camelCase context is parsed."""
        request = parse_prompt_request(
            {
                "prompt": "Dashboard",
                "generationContext": {
                    "targetLayout": "tablet",
                    "uiStrictness": "balanced",
                    "uxPatterns": {
                        "groupElements": False,
                        "formContainer": False,
                        "helperText": True,
                    },
                    "strictLayout": True,
                },
            }
        )
        context = request.resolved_context()
        assert context.target_layout == "tablet"
        assert context.ui_strictness == "balanced"
        assert context.ux_patterns.helper_text is True
        assert context.visual_baseline is True
        assert context.strict_layout is True

    @pytest.mark.unit
    @pytest.mark.parametrize("body", [{"prompt": ""}, {}, {"prompt": 5}])
    def test_invalid_prompt_rejected(self, body):
        """Empty, missing or non-string prompts fail."""
        with pytest.raises(RequestValidationError) as exc_info:
            parse_prompt_request(body)
        assert exc_info.value.issues[0].path == "prompt"

    @pytest.mark.unit
    def test_invalid_target_layout(self):
        """Unknown target layouts are reported with their path."""
        body = {
            "prompt": "x",
            "generationContext": {
                "targetLayout": "watch",
                "uiStrictness": "strict",
                "uxPatterns": {"groupElements": True, "formContainer": True, "helperText": False},
            },
        }
        with pytest.raises(RequestValidationError) as exc_info:
            parse_prompt_request(body)
        assert exc_info.value.issues[0].path == "generationContext.targetLayout"

    @pytest.mark.unit
    def test_default_context_values(self):
        """Default context is mobile/strict with form grouping."""
        ctx = DEFAULT_GENERATION_CONTEXT
        assert ctx.target_layout == "mobile"
        assert ctx.ui_strictness == "strict"
        assert ctx.ux_patterns.group_elements is True
        assert ctx.ux_patterns.form_container is True
        assert ctx.ux_patterns.helper_text is False


class TestHelpers:
    """Tests for traversal and schema export."""

    @pytest.mark.unit
    def test_iter_nodes_preorder(self, sample_spec):
        """Traversal is depth-first pre-order with index paths."""
        paths = [path for path, _ in iter_nodes(sample_spec)]
        assert paths == [
            "nodes[0]",
            "nodes[1]",
            "nodes[1].children[0]",
            "nodes[1].children[1]",
            "nodes[1].children[1].children[0]",
            "nodes[1].children[2]",
            "nodes[2]",
        ]

    @pytest.mark.unit
    def test_format_error_path(self):
        """Union tags after indexes are dropped."""
        loc = ("nodes", 0, "container", "children", 1, "text", "fontSize")
        assert format_error_path(loc) == "nodes[0].children[1].fontSize"
        assert format_error_path(()) == "root"

    @pytest.mark.unit
    def test_export_json_schema(self):
        """Schema uses wire names and lists required fields."""
        schema = export_json_schema()
        assert set(schema["required"]) == {"page", "frame", "nodes"}
        assert "borderRadius" in schema["$defs"]["ContainerNode"]["properties"]

    @pytest.mark.unit
    def test_design_spec_type(self, sample_spec):
        """Fixture builds a DesignSpec."""
        assert isinstance(sample_spec, DesignSpec)
