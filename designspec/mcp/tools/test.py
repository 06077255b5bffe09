"""Unit tests for MCP tools."""

import json

import pytest
from fastmcp.exceptions import ToolError

from designspec.llm import DesignSpecGenerator, UpstreamTimeoutError
from designspec.llm.conftest import MockLLMBackend
from designspec.validation import LAYOUT_ONLY_REASON

from .generate import INVALID_REQUEST, UPSTREAM_FAILURE, generate_design_spec
from .validate import validate_design_spec


def _payload(exc_info) -> dict:
    return json.loads(str(exc_info.value))


class TestGenerateDesignSpec:
    """Tests for generate_design_spec tool."""

    @pytest.mark.unit
    def test_dry_run(self, no_api_key):
        """Dry run works without a key and reports stats."""
        result = generate_design_spec("Create a login form", dry_run=True)

        assert result["spec"]["page"] == "Mock Page"
        assert result["stats"]["dryRun"] is True
        assert result["stats"]["model"] == "mock"
        assert result["warnings"] == []
        assert result["requestId"]

    @pytest.mark.unit
    def test_generation_context_forwarded(self):
        """Wire-format context changes the defaults."""
        context = {
            "targetLayout": "desktop",
            "uiStrictness": "strict",
            "uxPatterns": {"groupElements": True, "formContainer": True, "helperText": False},
        }
        result = generate_design_spec("Dashboard", generation_context=context, dry_run=True)
        assert result["spec"]["frame"]["height"] == 900

    @pytest.mark.unit
    def test_invalid_request_lists_fields(self):
        """Request violations come back with their paths."""
        context = {"targetLayout": "watch", "uiStrictness": "strict"}
        with pytest.raises(ToolError) as exc_info:
            generate_design_spec("x", generation_context=context, dry_run=True)

        payload = _payload(exc_info)
        assert payload["error"] == INVALID_REQUEST
        paths = {d["path"] for d in payload["details"]}
        assert "generationContext.targetLayout" in paths
        assert "generationContext.uxPatterns" in paths

    @pytest.mark.unit
    def test_live_generation(self, mock_generator):
        """The mock backend output is repaired and returned."""
        result = generate_design_spec("Create a login form", generator=mock_generator)

        assert result["spec"]["page"] == "Login"
        assert result["stats"]["backendRequestId"] == "req-mock-1"
        assert result["stats"]["totalTokens"] == 1900

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "backend",
        [
            MockLLMBackend(content=""),
            MockLLMBackend(content="{not json"),
            MockLLMBackend(content='{"page": "x"}'),
            MockLLMBackend(error=UpstreamTimeoutError()),
        ],
        ids=["empty", "invalid-json", "schema", "timeout"],
    )
    def test_upstream_failures_collapse(self, backend, mock_rules_dir):
        """Every generation failure maps to one generic upstream error."""
        from designspec.rules import RuleCache, RuleLoader

        generator = DesignSpecGenerator(
            backend=backend, loader=RuleLoader(rules_dir=mock_rules_dir, cache=RuleCache())
        )
        with pytest.raises(ToolError) as exc_info:
            generate_design_spec("Create a login form", generator=generator)

        payload = _payload(exc_info)
        assert payload == {"error": UPSTREAM_FAILURE, "message": "Failed to generate DesignSpec"}


class TestValidateDesignSpec:
    """Tests for validate_design_spec tool."""

    @pytest.mark.unit
    def test_valid_spec(self, sample_spec_dict):
        """A valid spec has no errors and carries metrics."""
        result = validate_design_spec(sample_spec_dict)

        assert result["valid"] is True
        assert result["errors"] == []
        assert result["analysis"] == {"nodes_count": 7, "depth": 3, "surface_nodes_count": 7}
        assert "spec" not in result

    @pytest.mark.unit
    def test_invalid_spec(self, sample_spec_dict):
        """Schema issues are reported with paths."""
        sample_spec_dict["nodes"][1]["gap"] = -1
        result = validate_design_spec(sample_spec_dict)

        assert result["valid"] is False
        assert result["analysis"] is None
        assert result["errors"][0]["path"] == "nodes[1].gap"

    @pytest.mark.unit
    def test_warnings_on_raw_spec(self, sample_spec_dict):
        """A styled wrapper without padding is flagged."""
        sample_spec_dict["nodes"].append(
            {
                "type": "container",
                "layout": "horizontal",
                "gap": 8,
                "padding": 0,
                "borderRadius": 12,
                "children": [{"type": "text", "content": "a"}, {"type": "text", "content": "b"}],
            }
        )
        result = validate_design_spec(sample_spec_dict)

        assert result["warnings"] == [
            {"path": "nodes[3]", "properties": ["borderRadius=12"], "reason": LAYOUT_ONLY_REASON}
        ]
        assert result["warningsSummary"]["warnings_count"] == 1

    @pytest.mark.unit
    def test_repair(self, sample_spec_dict):
        """With repair the DesignSpec comes back with defaults filled."""
        result = validate_design_spec(sample_spec_dict, repair=True, target_layout="tablet")

        assert result["spec"]["frame"]["height"] == 900
        assert result["spec"]["nodes"][2]["background"] == "#2563EB"
