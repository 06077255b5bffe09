"""Health checking for MCP server dependencies.

Provides centralized status checking for:
- Generation backend configuration (API key, model)
- Rule documents used for prompt assembly
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from designspec.config import EnvVar, get_environment
from designspec.rules import RuleLoader, RuleLoadError

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Overall health status."""

    HEALTHY = "healthy"  # Live generation available
    DEGRADED = "degraded"  # Dry runs only
    UNHEALTHY = "unhealthy"  # Rules missing, nothing works


@dataclass
class ServiceStatus:
    """Status of a single service/dependency."""

    available: bool
    message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"available": self.available, "message": self.message, **self.details}


@dataclass
class ServerHealth:
    """Complete server health report."""

    status: HealthStatus
    version: str
    checked_at: datetime

    llm_backend: ServiceStatus
    rules: ServiceStatus

    can_generate: bool
    can_dry_run: bool

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "status": self.status.value,
            "version": self.version,
            "checked_at": self.checked_at.isoformat(),
            "services": {
                "llm_backend": self.llm_backend.to_dict(),
                "rules": self.rules.to_dict(),
            },
            "capabilities": {
                "generate_design_spec": self.can_generate,
                "dry_run": self.can_dry_run,
                "validate_design_spec": True,
            },
        }


def check_llm_backend() -> ServiceStatus:
    """Check whether live generation is configured."""
    model = get_environment(EnvVar.OPENAI_MODEL)
    if not get_environment(EnvVar.OPENAI_API_KEY):
        return ServiceStatus(
            available=False,
            message="OPENAI_API_KEY not set. Only dry runs are available",
            details={"model": model},
        )
    return ServiceStatus(
        available=True,
        message=f"OpenAI backend configured ({model})",
        details={"model": model},
    )


def check_rules(loader: RuleLoader | None = None) -> ServiceStatus:
    """Check that every required rule document loads."""
    loader = loader or RuleLoader()
    try:
        rules_dir = loader.rules_dir
        loader.load("", "mobile", "strict", True)
    except RuleLoadError as e:
        return ServiceStatus(
            available=False,
            message=str(e),
            details={"path": str(e.path)},
        )
    return ServiceStatus(
        available=True,
        message=f"Rules loaded from {rules_dir}",
        details={"path": str(rules_dir)},
    )


def get_server_health(loader: RuleLoader | None = None) -> ServerHealth:
    """Get comprehensive server health status.

    Returns:
        ServerHealth with status of all services.
    """
    from .lib import get_server_version

    llm_backend = check_llm_backend()
    rules = check_rules(loader)

    can_dry_run = rules.available
    can_generate = rules.available and llm_backend.available

    if can_generate:
        status = HealthStatus.HEALTHY
    elif can_dry_run:
        status = HealthStatus.DEGRADED
    else:
        status = HealthStatus.UNHEALTHY

    return ServerHealth(
        status=status,
        version=get_server_version(),
        checked_at=datetime.now(UTC),
        llm_backend=llm_backend,
        rules=rules,
        can_generate=can_generate,
        can_dry_run=can_dry_run,
    )


def format_startup_banner(health: ServerHealth) -> str:
    """Format a startup status banner for logging.

    Args:
        health: Server health status.

    Returns:
        Formatted multi-line banner string.
    """
    status_icon = {
        HealthStatus.HEALTHY: "[OK]",
        HealthStatus.DEGRADED: "[!!]",
        HealthStatus.UNHEALTHY: "[XX]",
    }

    def svc_icon(available: bool) -> str:
        return "[OK]" if available else "[--]"

    lines = [
        "",
        "=" * 60,
        f"  DesignSpec Generator v{health.version}",
        "=" * 60,
        f"  Status: {status_icon[health.status]} {health.status.value.upper()}",
        "",
        "  Services:",
        f"    {svc_icon(health.llm_backend.available)} LLM Backend: {health.llm_backend.message}",
        f"    {svc_icon(health.rules.available)} Rules:       {health.rules.message}",
        "",
        "  Capabilities:",
        f"    generate_design_spec: {'Yes' if health.can_generate else 'No - needs API key'}",
        f"    dry_run:              {'Yes' if health.can_dry_run else 'No - needs rules'}",
    ]

    if health.status != HealthStatus.HEALTHY:
        lines.append("")
        lines.append("  Action Required:")
        if not health.llm_backend.available:
            lines.append("    - Set OPENAI_API_KEY in .env")
        if not health.rules.available:
            lines.append("    - Point SPEC_RULES_DIR at a directory containing base.json")

    lines.extend(["", "=" * 60, ""])

    return "\n".join(lines)


def log_startup_status() -> None:
    """Log server health status on startup."""
    health = get_server_health()

    for line in format_startup_banner(health).split("\n"):
        if line.strip():
            logger.info(line)

    if health.status == HealthStatus.UNHEALTHY:
        logger.error("Server is UNHEALTHY - rule documents could not be loaded.")
    elif health.status == HealthStatus.DEGRADED:
        logger.warning("Server is DEGRADED - only dry runs will succeed.")
    else:
        logger.info("Server is ready - all features available.")


__all__ = [
    "HealthStatus",
    "ServiceStatus",
    "ServerHealth",
    "check_llm_backend",
    "check_rules",
    "get_server_health",
    "format_startup_banner",
    "log_startup_status",
]
