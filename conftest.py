"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Rule cache isolation between tests
- Sample DesignSpec documents shared across test modules
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Generator

import pytest
from dotenv import load_dotenv

if TYPE_CHECKING:
    from designspec.schema import DesignSpec

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_rule_cache() -> Generator[None, None, None]:
    """Reset the process-wide rule cache around every test."""
    from designspec.rules import reset_rule_cache

    reset_rule_cache()
    yield
    reset_rule_cache()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer .env overrides from leaking into unit tests."""
    for name in (
        "SPEC_RULES_DIR",
        "OPENAI_TIMEOUT_MS",
        "OPENAI_RETRY_MAX",
        "OPENAI_RETRY_BASE_MS",
        "OPENAI_MODEL",
        "OPENAI_NO_TEMPERATURE_MODELS",
        "OPENAI_TEMPERATURE",
        "OPENAI_BASE_URL",
        "LOG_DEBUG_PAYLOADS",
        "BUDGET_MAX_TOKENS",
        "BUDGET_MAX_DURATION_MS",
        "BUDGET_MAX_COMPLETION_RATIO",
        "MCP_HOST",
        "MCP_PORT",
    ):
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Common Test Fixtures
# =============================================================================


@pytest.fixture
def no_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove OPENAI_API_KEY for the duration of a test."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


@pytest.fixture
def sample_spec_dict() -> dict[str, Any]:
    """A login screen in wire format.

    Returns:
        A DesignSpec dict with a text, a styled form card and a button.
    """
    return {
        "page": "Login",
        "frame": {
            "name": "Login Screen",
            "width": 390,
            "layout": "vertical",
            "gap": 16,
            "padding": 24,
        },
        "nodes": [
            {"type": "text", "content": "Welcome back", "fontSize": 24},
            {
                "type": "container",
                "layout": "vertical",
                "gap": 12,
                "padding": 24,
                "background": "#FFFFFF",
                "borderRadius": 12,
                "children": [
                    {"type": "text", "content": "Email", "fontSize": 14},
                    {
                        "type": "container",
                        "layout": "horizontal",
                        "gap": 0,
                        "padding": 12,
                        "border": {"color": "#D1D5DB", "width": 1},
                        "children": [
                            {"type": "text", "content": "Enter your email"}
                        ],
                    },
                    {"type": "button", "label": "Sign In"},
                ],
            },
            {"type": "button", "label": "Create account"},
        ],
    }


@pytest.fixture
def sample_spec(sample_spec_dict: dict[str, Any]) -> DesignSpec:
    """The login screen as a validated DesignSpec."""
    from designspec.schema import parse_design_spec

    return parse_design_spec(sample_spec_dict)


# =============================================================================
# Rule Directory Fixtures
# =============================================================================

MOCK_BASE = {"name": "base", "description": "Base rules", "rules": ["Rule 1", "Rule 2"]}
MOCK_LAYOUT = {
    "name": "layout",
    "description": "Layout rules",
    "rules": ["Layout rule 1"],
    "strictRules": ["Strict rule 1", "Strict rule 2"],
    "balancedRules": ["Balanced rule 1"],
}
MOCK_DEVICES = {
    "name": "devices",
    "description": "Device rules",
    "mobile": {"width": "~375-400px", "height": "800px", "rules": ["Mobile rule 1"]},
    "tablet": {
        "width": "~768px",
        "height": "900px",
        "rules": ["Tablet rule 1", "Tablet rule 2"],
    },
    "desktop": {"width": "~1200px", "height": "900px", "rules": ["Desktop rule 1"]},
}
MOCK_VISUAL_BASELINE = {
    "name": "visual-baseline",
    "description": "Visual baseline",
    "rules": ["Baseline rule 1"],
}
MOCK_AUTH_FORM = {
    "name": "auth-form",
    "description": "Auth screens",
    "detectionKeywords": ["login", "sign in", "password"],
    "rules": ["Auth rule 1"],
}


def write_rules_dir(root: Path, *, with_patterns: bool = True) -> Path:
    """Write the mock rule documents under ``root/spec-rules``."""
    rules_dir = root / "spec-rules"
    (rules_dir / "patterns").mkdir(parents=True)
    documents = {
        "base.json": MOCK_BASE,
        "layout.json": MOCK_LAYOUT,
        "devices.json": MOCK_DEVICES,
        "visual-baseline.json": MOCK_VISUAL_BASELINE,
    }
    if with_patterns:
        documents["patterns/auth-form.json"] = MOCK_AUTH_FORM
    for name, content in documents.items():
        (rules_dir / name).write_text(json.dumps(content), encoding="utf-8")
    return rules_dir


@pytest.fixture
def mock_rules_dir(tmp_path: Path) -> Path:
    """A rule directory holding the mock documents above."""
    return write_rules_dir(tmp_path)


@pytest.fixture
def mock_rules_dir_without_patterns(tmp_path: Path) -> Path:
    """A rule directory with the required documents only."""
    return write_rules_dir(tmp_path, with_patterns=False)
