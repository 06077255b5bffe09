"""CLI entry point for designspec.

This module acts as the central entry point for the project's CLI tools.
It delegates commands to the appropriate submodules or runs specific tasks.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from designspec.core.log import get_logger, setup_logging

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


def _build_generation_context(args: argparse.Namespace) -> dict[str, Any]:
    """Wire-format generation context from CLI flags."""
    return {
        "targetLayout": args.target_layout,
        "uiStrictness": args.strictness,
        "uxPatterns": {
            "groupElements": True,
            "formContainer": True,
            "helperText": args.helper_text,
        },
        "visualBaseline": not args.no_visual_baseline,
        "strictLayout": args.strict_layout,
    }


def _write_result(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
        logger.info(f"Saved to {output}")
    else:
        print(text)


# =============================================================================
# Generate Command
# =============================================================================


def cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate command."""
    from designspec.llm import DesignSpecGenerator, LLMError
    from designspec.rules import RuleLoadError
    from designspec.schema import RequestValidationError, SpecValidationError

    request = {
        "prompt": args.prompt,
        "generationContext": _build_generation_context(args),
    }

    try:
        output = DesignSpecGenerator().generate(request, dry_run=args.dry_run)
    except RequestValidationError as e:
        for issue in e.issues:
            logger.error(f"Invalid request: {issue.path}: {issue.message}")
        return 2
    except (LLMError, SpecValidationError, RuleLoadError) as e:
        logger.error(f"Generation failed: {e}")
        return 1

    result = output.to_dict() if args.full else output.to_dict()["spec"]
    _write_result(json.dumps(result, indent=2, ensure_ascii=False), args.output)

    for warning in output.warnings:
        logger.warning(f"{warning.path}: {warning.reason} ({', '.join(warning.properties)})")

    logger.info(
        f"Stats: model={output.stats.model}, "
        f"{output.stats.total_tokens} tokens, "
        f"{output.stats.retry_count} retries, "
        f"{output.analysis.nodes_count} nodes"
    )
    return 0


def handle_generate_command(argv: list[str]) -> int:
    """Handle generate-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . generate",
        description="Generate a DesignSpec from a natural-language prompt",
    )
    parser.add_argument(
        "prompt",
        type=str,
        help="Natural language description of the screen",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Return the repaired mock spec without calling the model",
    )
    parser.add_argument(
        "--target-layout",
        "-t",
        type=str,
        default="mobile",
        choices=["mobile", "tablet", "desktop"],
        help="Target device class (default: mobile)",
    )
    parser.add_argument(
        "--strictness",
        "-s",
        type=str,
        default="strict",
        choices=["strict", "balanced"],
        help="Layout rule variant (default: strict)",
    )
    parser.add_argument(
        "--no-visual-baseline",
        action="store_true",
        help="Omit the visual-baseline rules from the prompt",
    )
    parser.add_argument(
        "--strict-layout",
        action="store_true",
        help="Mark layout rules as mandatory",
    )
    parser.add_argument(
        "--helper-text",
        action="store_true",
        help="Ask for helper text under inputs",
    )
    parser.add_argument(
        "--full",
        action="store_true",
        help="Print warnings and analysis along with the spec",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path (prints to stdout if not specified)",
    )

    if not argv:
        parser.print_help()
        return 1

    return cmd_generate(parser.parse_args(argv))


# =============================================================================
# Validate Command
# =============================================================================


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle the validate command."""
    from designspec.mcp.tools.validate import validate_design_spec

    try:
        spec = json.loads(args.file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.error(f"File not found: {args.file}")
        return 1
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {args.file}: {e}")
        return 1

    result = validate_design_spec(spec, repair=args.repair, target_layout=args.target_layout)

    if not result["valid"]:
        for error in result["errors"]:
            logger.error(f"{error['path']}: {error['message']}")
        return 1

    for warning in result["warnings"]:
        logger.warning(f"{warning['path']}: {warning['reason']}")

    analysis = result["analysis"]
    logger.info(
        f"Valid: {analysis['nodes_count']} nodes, depth {analysis['depth']}, "
        f"{analysis['surface_nodes_count']} surfaces, {len(result['warnings'])} warning(s)"
    )

    if args.repair:
        _write_result(json.dumps(result["spec"], indent=2, ensure_ascii=False), args.output)
    return 0


def handle_validate_command(argv: list[str]) -> int:
    """Handle validate-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . validate",
        description="Validate a DesignSpec JSON file",
    )
    parser.add_argument("file", type=Path, help="DesignSpec JSON file")
    parser.add_argument(
        "--repair",
        action="store_true",
        help="Fill empty text and visual defaults, then print the repaired spec",
    )
    parser.add_argument(
        "--target-layout",
        "-t",
        type=str,
        default="mobile",
        choices=["mobile", "tablet", "desktop"],
        help="Device class used for defaults when repairing (default: mobile)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Where to write the repaired spec (prints to stdout if not specified)",
    )

    if not argv:
        parser.print_help()
        return 1

    return cmd_validate(parser.parse_args(argv))


# =============================================================================
# Rules Command
# =============================================================================


def cmd_rules(args: argparse.Namespace) -> int:
    """Print the system prompt assembled for a prompt and context."""
    from designspec.prompt import PromptAssemblyOptions, PromptBuilder
    from designspec.rules import RuleLoadError

    options = PromptAssemblyOptions(
        user_prompt=args.prompt,
        target_layout=args.target_layout,
        ui_strictness=args.strictness,
        visual_baseline=not args.no_visual_baseline,
        strict_layout=args.strict_layout,
        helper_text=args.helper_text,
    )

    try:
        prompt, context = PromptBuilder().build_with_context(options)
    except RuleLoadError as e:
        logger.error(f"Rules could not be loaded: {e}")
        return 1

    print(prompt)
    logger.info(
        f"layout_variant={context.layout_variant} "
        f"patterns={context.pattern_names or 'none'} "
        f"tokens~{context.total_tokens_estimate}"
    )
    return 0


def handle_rules_command(argv: list[str]) -> int:
    """Handle rules-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . rules",
        description="Show the system prompt assembled from the rule documents",
    )
    parser.add_argument(
        "prompt",
        type=str,
        nargs="?",
        default="",
        help="Prompt used for pattern matching (default: none)",
    )
    parser.add_argument(
        "--target-layout",
        "-t",
        type=str,
        default="mobile",
        choices=["mobile", "tablet", "desktop"],
    )
    parser.add_argument(
        "--strictness",
        "-s",
        type=str,
        default="strict",
        choices=["strict", "balanced"],
    )
    parser.add_argument("--no-visual-baseline", action="store_true")
    parser.add_argument("--strict-layout", action="store_true")
    parser.add_argument("--helper-text", action="store_true")

    return cmd_rules(parser.parse_args(argv))


# =============================================================================
# MCP Command
# =============================================================================


def handle_mcp_command(argv: list[str]) -> int:
    """Handle MCP server commands.

    Usage:
        python . mcp run              # Start in STDIO mode
        python . mcp serve            # Start in HTTP mode
        python . mcp serve --port 8080
        python . mcp info             # Show server info
    """
    if not argv:
        print("MCP Server Commands")
        print("\nUsage: python . mcp {command} [options]")
        print("\nCommands:")
        print("  run                 Start server in STDIO mode")
        print("  serve               Start server in HTTP mode")
        print("  info                Show server information")
        print("\nOptions for 'serve':")
        print("  --host HOST         Bind address (default: MCP_HOST or 0.0.0.0)")
        print("  --port PORT         Port number (default: MCP_PORT or 18080)")
        print("  --transport TYPE    Transport: http or sse (default: http)")
        print("\nExamples:")
        print("  python . mcp run")
        print("  python . mcp serve --port 8080")
        return 1

    subcommand = argv[0]
    subargs = argv[1:]

    if subcommand == "run":
        from designspec.mcp.server import main as server_main

        return server_main(["--transport", "stdio", *subargs])

    elif subcommand == "serve":
        from designspec.mcp.server import main as server_main

        if "--transport" not in subargs and "-t" not in subargs:
            subargs = ["--transport", "http", *subargs]
        return server_main(subargs)

    elif subcommand == "info":
        from designspec.mcp import get_server_capabilities, get_server_version
        from designspec.mcp.health import format_startup_banner, get_server_health

        capabilities = get_server_capabilities()
        print(f"Version: {get_server_version()}")
        print("\nTools:")
        for tool in capabilities["tools"]:
            print(f"  - {tool}")
        print("\nResources:")
        for uri in capabilities["resources"]:
            print(f"  - {uri}")
        print(format_startup_banner(get_server_health()))
        return 0

    else:
        logger.error(f"Unknown mcp command: {subcommand}")
        return handle_mcp_command([])


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\nCommands:")
    print("  generate   Generate a DesignSpec from natural language")
    print("  validate   Validate (and optionally repair) a DesignSpec file")
    print("  rules      Show the assembled system prompt")
    print("  mcp        Run MCP server (STDIO or HTTP mode)")
    print("\nExamples:")
    print("  python . generate 'login form with email and password'")
    print("  python . generate 'settings page' -t desktop -s balanced -o spec.json")
    print("  python . generate 'anything' --dry-run")
    print("  python . validate spec.json --repair")
    print("  python . rules 'login form' -t tablet")
    print("  python . mcp serve --port 18080")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    commands = {
        "generate": lambda: handle_generate_command(rest_args),
        "validate": lambda: handle_validate_command(rest_args),
        "rules": lambda: handle_rules_command(rest_args),
    }

    # The server configures its own logging
    if command == "mcp":
        return handle_mcp_command(rest_args)

    if command in commands:
        from designspec.config import EnvVar, get_environment

        setup_logging(get_environment(EnvVar.LOG_LEVEL))
        return commands[command]()

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
