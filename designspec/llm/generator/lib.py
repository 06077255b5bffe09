"""DesignSpecGenerator orchestrator for prompt-driven DesignSpec generation.

Integrates PromptBuilder, the generation backend, schema validation and the
repair pipeline to turn a natural-language request into a repaired,
schema-valid DesignSpec.
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

from designspec.analysis import (
    AggregatedWarnings,
    BudgetLimits,
    BudgetMetrics,
    SpecAnalysis,
    aggregate_warnings,
    analyze_spec,
    check_budget_alerts,
    compute_hash,
    compute_object_hash,
)
from designspec.config import EnvVar, get_environment
from designspec.core.log import RequestLogger
from designspec.prompt import (
    ASSISTANT_PROMPT,
    PromptAssemblyOptions,
    PromptBuilder,
    PromptContext,
)
from designspec.repair import run_repair_pipeline
from designspec.rules import RuleLoader, RuleLoadError
from designspec.schema import (
    DesignSpec,
    PromptRequest,
    SpecValidationError,
    parse_design_spec,
    parse_prompt_request,
    serialize_design_spec,
)
from designspec.validation import VisualUsageWarning

from ..backend import LLMBackend, create_llm_backend
from ..backend.base import EmptyResponseError, GenerationConfig, InvalidJSONError, LLMError

logger = logging.getLogger(__name__)


@dataclass
class GeneratorConfig:
    """Configuration for DesignSpecGenerator.

    Attributes:
        temperature: Sampling temperature override. None uses the backend
            default.
        assistant_prompt: Fixed assistant message sent with every request.
        debug_payloads: Log raw prompts and backend content. None reads
            LOG_DEBUG_PAYLOADS.
        budget_limits: Alert thresholds. None reads the BUDGET_* variables.
        paths_sample_size: Warning paths kept in the summary.
    """

    temperature: float | None = None
    assistant_prompt: str = ASSISTANT_PROMPT
    debug_payloads: bool | None = None
    budget_limits: BudgetLimits | None = None
    paths_sample_size: int = 3


@dataclass
class GenerationStats:
    """Statistics from one generation request.

    Attributes:
        model: Model identifier that produced the DesignSpec ("mock" for dry runs).
        dry_run: Whether the backend was bypassed.
        prompt_tokens: Prompt tokens reported by the backend.
        completion_tokens: Completion tokens reported by the backend.
        total_tokens: Total tokens reported by the backend.
        duration_ms: Backend call duration including retries.
        retry_count: Retries performed by the backend client.
        backend_request_id: Backend-assigned request id.
        prompt_hash: SHA-256 of the user prompt.
        spec_hash: SHA-256 of the serialized, repaired spec.
        budget_alerts: Events of any exceeded budgets.
    """

    model: str = ""
    dry_run: bool = False
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    duration_ms: float = 0.0
    retry_count: int = 0
    backend_request_id: str | None = None
    prompt_hash: str = ""
    spec_hash: str = ""
    budget_alerts: list[str] = field(default_factory=list)


@dataclass
class GenerationOutput:
    """Complete output from DesignSpec generation.

    Attributes:
        spec: Repaired, schema-valid DesignSpec.
        warnings: Visual-usage diagnostics on the repaired spec.
        stats: Generation statistics.
        analysis: Structural metrics of the DesignSpec.
        warnings_summary: Aggregated warnings.
        request_id: Correlation id used in every log line of the request.
        prompt_context: What went into the system prompt (None for dry runs).
    """

    spec: DesignSpec
    warnings: list[VisualUsageWarning]
    stats: GenerationStats
    analysis: SpecAnalysis
    warnings_summary: AggregatedWarnings
    request_id: str
    prompt_context: PromptContext | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON transport; the DesignSpec uses its wire format."""
        return {
            "requestId": self.request_id,
            "spec": serialize_design_spec(self.spec),
            "warnings": [w.to_dict() for w in self.warnings],
            "warningsSummary": self.warnings_summary.to_dict(),
            "analysis": self.analysis.to_dict(),
        }


def build_mock_spec() -> DesignSpec:
    """Fixed DesignSpec returned by dry runs, before repair."""
    return parse_design_spec(
        {
            "page": "Mock Page",
            "frame": {
                "name": "Mock Frame",
                "width": 400,
                "layout": "vertical",
                "gap": 16,
                "padding": 24,
            },
            "nodes": [
                {"type": "text", "content": "Mock content", "fontSize": 16},
                {
                    "type": "container",
                    "layout": "vertical",
                    "gap": 12,
                    "padding": 16,
                    "children": [{"type": "text", "content": "Nested text", "fontSize": 14}],
                },
                {"type": "button", "label": "Mock Button"},
            ],
        }
    )


class DesignSpecGenerator:
    """Orchestrates DesignSpec generation for one request at a time.

    Pipeline:
        1. Assemble the system prompt from rule documents
        2. Request a JSON completion from the backend
        3. Parse and validate the DesignSpec
        4. Repair empty text, fill defaults, collect visual warnings
        5. Analyze, hash and check budgets

    Dry runs skip steps 1-3 and feed a fixed mock spec into step 4.

    Example:
        >>> generator = DesignSpecGenerator()
        >>> output = generator.generate("Create a login form")
        >>> print(output.spec.page)

        >>> # Without an API key
        >>> output = DesignSpecGenerator().generate("Create a login form", dry_run=True)
    """

    def __init__(
        self,
        backend: LLMBackend | None = None,
        loader: RuleLoader | None = None,
        config: GeneratorConfig | None = None,
    ):
        """Initialize DesignSpecGenerator.

        Args:
            backend: Generation backend. Created on the first live request
                if None, so dry runs need no API key.
            loader: Rule loader for prompt assembly.
            config: Generator configuration.
        """
        self._backend = backend
        self._config = config or GeneratorConfig()
        self._prompt_builder = PromptBuilder(loader)

    @property
    def backend(self) -> LLMBackend:
        if self._backend is None:
            self._backend = create_llm_backend()
        return self._backend

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    def _debug_payloads(self) -> bool:
        if self._config.debug_payloads is not None:
            return self._config.debug_payloads
        return get_environment(EnvVar.LOG_DEBUG_PAYLOADS)

    def generate(
        self,
        request: PromptRequest | dict[str, Any] | str,
        *,
        dry_run: bool = False,
    ) -> GenerationOutput:
        """Generate a repaired DesignSpec from a request.

        Args:
            request: PromptRequest, its wire-format dict, or a bare prompt.
            dry_run: Return the repaired mock spec without calling the backend.

        Returns:
            GenerationOutput with the DesignSpec, warnings and metadata.

        Raises:
            RequestValidationError: If the request is malformed.
            RuleLoadError: If a required rule document cannot be loaded.
            UpstreamError: If the backend call timed out or failed.
            EmptyResponseError: If the backend returned no content.
            InvalidJSONError: If the content is not JSON.
            SpecValidationError: If the content is not a valid DesignSpec.
        """
        if isinstance(request, str):
            request = parse_prompt_request({"prompt": request})
        elif not isinstance(request, PromptRequest):
            request = parse_prompt_request(request)

        request_id = str(uuid.uuid4())
        log = RequestLogger(logger, request_id)
        context = request.resolved_context()
        stats = GenerationStats(dry_run=dry_run, prompt_hash=compute_hash(request.prompt))

        log.info(
            f"generation.started prompt_hash={stats.prompt_hash} "
            f"target_layout={context.target_layout} ui_strictness={context.ui_strictness} "
            f"dry_run={dry_run}"
        )
        if self._debug_payloads():
            log.debug(f"Prompt: {request.prompt}")

        prompt_context: PromptContext | None = None
        try:
            if dry_run:
                log.info("Dry run mode - returning mock spec")
                stats.model = "mock"
                spec = build_mock_spec()
            else:
                spec, prompt_context = self._generate_live(request, stats, log)
        except (LLMError, SpecValidationError, RuleLoadError) as e:
            log.error(
                f"generation.failed prompt_hash={stats.prompt_hash} "
                f"error_type={type(e).__name__} retry_count={stats.retry_count}: {e}"
            )
            raise

        repaired = run_repair_pipeline(spec, context)
        analysis = analyze_spec(repaired.spec)
        summary = aggregate_warnings(repaired.warnings, self._config.paths_sample_size)
        stats.spec_hash = compute_object_hash(serialize_design_spec(repaired.spec))

        if not dry_run:
            metrics = BudgetMetrics(
                total_tokens=stats.total_tokens,
                prompt_tokens=stats.prompt_tokens,
                completion_tokens=stats.completion_tokens,
                duration_ms=stats.duration_ms,
                model=stats.model,
                prompt_hash=stats.prompt_hash,
                spec_hash=stats.spec_hash,
            )
            alerts = check_budget_alerts(metrics, self._config.budget_limits, log)
            stats.budget_alerts = [alert.event for alert in alerts]

        log.info(
            f"generation.completed spec_hash={stats.spec_hash} model={stats.model} "
            f"nodes={analysis.nodes_count} depth={analysis.depth} "
            f"warnings={summary.warnings_count} retry_count={stats.retry_count} "
            f"duration_ms={stats.duration_ms:.0f}"
        )

        return GenerationOutput(
            spec=repaired.spec,
            warnings=repaired.warnings,
            stats=stats,
            analysis=analysis,
            warnings_summary=summary,
            request_id=request_id,
            prompt_context=prompt_context,
        )

    def _generate_live(
        self,
        request: PromptRequest,
        stats: GenerationStats,
        log: RequestLogger,
    ) -> tuple[DesignSpec, PromptContext]:
        """Build the prompt, call the backend and validate its content."""
        options = PromptAssemblyOptions.from_request(request.prompt, request.generation_context)
        system_prompt, prompt_context = self._prompt_builder.build_with_context(options)
        log.debug(
            f"System prompt assembled: layout_variant={prompt_context.layout_variant} "
            f"patterns={prompt_context.pattern_names} "
            f"tokens~{prompt_context.total_tokens_estimate}"
        )

        backend = self.backend
        gen_config = GenerationConfig(
            temperature=self._config.temperature,
            json_mode=True,
            assistant_prompt=self._config.assistant_prompt,
        )

        started = time.perf_counter()
        result = backend.generate(request.prompt, system_prompt=system_prompt, config=gen_config)

        stats.model = result.model or backend.model_name
        stats.duration_ms = result.duration_ms or (time.perf_counter() - started) * 1000
        stats.retry_count = result.retry_count
        stats.backend_request_id = result.backend_request_id
        stats.prompt_tokens = result.usage.get("prompt_tokens", 0)
        stats.completion_tokens = result.usage.get("completion_tokens", 0)
        stats.total_tokens = result.usage.get(
            "total_tokens", stats.prompt_tokens + stats.completion_tokens
        )

        log.info(
            f"Completion received backend_request_id={stats.backend_request_id} "
            f"retry_count={stats.retry_count} total_tokens={stats.total_tokens}"
        )

        content = result.content
        if not content:
            raise EmptyResponseError("Empty response from OpenAI")

        if self._debug_payloads():
            log.debug(f"Received content: {content}")

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            raise InvalidJSONError("Invalid JSON response from OpenAI") from e

        return parse_design_spec(parsed), prompt_context


__all__ = [
    "DesignSpecGenerator",
    "GeneratorConfig",
    "GenerationStats",
    "GenerationOutput",
    "build_mock_spec",
]
