"""
confstack — command-line interface router.

File: src/confstack/ui/cli.py
Last updated: 2026-02-12

Purpose
- Map ``load``, ``validate``, ``export``, ``inspect``, ``env``, and ``init`` onto the
  loader and manager.

Functional requirements
- Machine-readable output goes to stdout; diagnostics and logs go to stderr.
- ``validate`` always fails on diagnostics; other commands only under ``--strict``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Final
from urllib.parse import urlsplit

import yaml

from confstack.config import (
    EXPORT_FORMATS,
    MISSING,
    ConfigLoader,
    ConfigManager,
    ConfigProfile,
    LoadOptions,
    LoadResult,
    env_var_definitions,
    get_path,
    is_blank,
    render_export,
    resolve_environment,
    validate_config,
    validate_env_vars,
)
from confstack.config.exporters import format_env_value
from confstack.constants import ENVIRONMENT_VARIABLE
from confstack.observability import LOG_FORMATS, setup_logging
from confstack.security import SecretAuditReport, audit_secrets, redact_paths
from confstack.ui.render import CLIRenderer, create_renderer

LOG_LEVEL_VARIABLE: Final[str] = "CONFSTACK_LOG_LEVEL"
DEFAULT_LOG_LEVEL: Final[str] = "warning"

SUMMARY_FEATURES: Final[tuple[str, ...]] = (
    "authentication",
    "billing",
    "subscriptions",
    "fileUploads",
    "emailNotifications",
    "multiTenant",
    "apiRateLimiting",
    "advancedAnalytics",
    "realTimeFeatures",
    "webhookSupport",
    "aiIntegration",
    "advancedReporting",
    "customDomains",
    "whiteLabeling",
)
SUMMARY_SECURITY: Final[tuple[tuple[str, str], ...]] = (
    ("cors", "security.cors.enabled"),
    ("rateLimit", "security.rateLimit.enabled"),
    ("csp", "security.csp.enabled"),
    ("https", "security.https.enforced"),
)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="confstack",
        description=(
            "confstack — layered multi-environment configuration.\n\n"
            "Common workflows:\n"
            "  confstack load --env staging     Load and display configuration\n"
            "  confstack validate               Exit non-zero on any diagnostic\n"
            "  confstack export env             Print operational KEY=value lines\n"
            "  confstack env --validate         Check variables against their declared types\n"
            "  confstack init --env production  Write a .env.production template\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--env",
        "-e",
        dest="environment",
        default=None,
        help=f"Environment name (default: ${ENVIRONMENT_VARIABLE}, else development).",
    )
    common.add_argument(
        "--strict",
        action="store_true",
        default=False,
        help="Exit with status 1 when any validation error or missing variable is reported.",
    )
    common.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default: ${LOG_LEVEL_VARIABLE}, else {DEFAULT_LOG_LEVEL}).",
    )
    common.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default="json",
        help="Log line format written to stderr.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # load ----------------------------------------------------------------
    load_parser = subparsers.add_parser(
        "load",
        parents=[common],
        help="Load and display configuration",
        description=(
            "Load one environment's configuration and print it with every diagnostic.\n\n"
            "Examples:\n"
            "  confstack load\n"
            "  confstack load --env production --sanitize\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    load_parser.add_argument(
        "--sanitize", action="store_true", help="Redact sensitive fields before printing"
    )
    load_parser.add_argument(
        "--no-validate",
        dest="validate",
        action="store_false",
        default=True,
        help="Skip schema validation",
    )
    load_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    load_parser.set_defaults(handler=_cmd_load)

    # validate ------------------------------------------------------------
    validate_parser = subparsers.add_parser(
        "validate",
        parents=[common],
        help="Validate configuration from the environment or a file",
        description=(
            "Validate the loaded configuration, or a JSON/YAML document given with --file.\n"
            "Always exits with status 1 when validation fails. In production, secret\n"
            "variables must also pass the strength audit.\n\n"
            "Examples:\n"
            "  confstack validate --env staging\n"
            "  confstack validate --file config.json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    validate_parser.add_argument(
        "--file", "-f", dest="file_path", default=None, help="JSON or YAML document to validate"
    )
    validate_parser.add_argument(
        "--json", action="store_true", help="Emit deterministic JSON output"
    )
    validate_parser.set_defaults(handler=_cmd_validate)

    # export --------------------------------------------------------------
    export_parser = subparsers.add_parser(
        "export",
        parents=[common],
        help="Export configuration as JSON, env lines, or YAML",
        description=(
            "Serialize the active configuration.\n\n"
            "Examples:\n"
            "  confstack export json\n"
            "  confstack export env --output .env.export\n"
            "  confstack export yaml --sanitize\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    export_parser.add_argument(
        "format",
        nargs="?",
        default="json",
        choices=EXPORT_FORMATS,
        help="Output format (default: json)",
    )
    export_parser.add_argument("--output", "-o", default=None, help="Write to a file instead")
    export_parser.add_argument(
        "--sanitize", action="store_true", help="Redact sensitive fields before exporting"
    )
    export_parser.set_defaults(handler=_cmd_export)

    # inspect -------------------------------------------------------------
    inspect_parser = subparsers.add_parser(
        "inspect",
        parents=[common],
        help="Summarize configuration or print one section",
        description=(
            "Show a feature/service/security overview, or one top-level section.\n\n"
            "Examples:\n"
            "  confstack inspect\n"
            "  confstack inspect database --sanitize\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    inspect_parser.add_argument("section", nargs="?", default=None, help="Top-level section name")
    inspect_parser.add_argument(
        "--sanitize", action="store_true", help="Redact sensitive fields before printing"
    )
    inspect_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    inspect_parser.set_defaults(handler=_cmd_inspect)

    # env -----------------------------------------------------------------
    env_parser = subparsers.add_parser(
        "env",
        parents=[common],
        help="List, check, or template the recognised environment variables",
        description=(
            "Work with the environment-variable catalog for one environment.\n"
            "--validate checks profile defaults overlaid with the process environment.\n\n"
            "Examples:\n"
            "  confstack env --list --env staging\n"
            "  confstack env --validate --env production\n"
            "  confstack env --template > .env.example\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    env_mode = env_parser.add_mutually_exclusive_group()
    env_mode.add_argument(
        "--list",
        dest="env_mode",
        action="store_const",
        const="list",
        help="Show each variable with its type, requiredness, and default (default)",
    )
    env_mode.add_argument(
        "--validate",
        dest="env_mode",
        action="store_const",
        const="validate",
        help="Coerce every variable and report each failure",
    )
    env_mode.add_argument(
        "--template",
        dest="env_mode",
        action="store_const",
        const="template",
        help="Print a .env template to stdout",
    )
    env_parser.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    env_parser.set_defaults(handler=_cmd_env, env_mode="list")

    # init ----------------------------------------------------------------
    init_parser = subparsers.add_parser(
        "init",
        parents=[common],
        help="Write a .env.<environment> template",
        description=(
            "Generate a commented environment-variable template for one environment.\n\n"
            "Examples:\n"
            "  confstack init --env staging\n"
            "  confstack init --env production --force\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    init_parser.add_argument(
        "--force", action="store_true", help="Overwrite an existing template file"
    )
    init_parser.add_argument(
        "--directory", default=".", help="Directory for the template (default: current)"
    )
    init_parser.set_defaults(handler=_cmd_init)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        _configure_logging(namespace)
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_load(args: argparse.Namespace) -> int:
    result = _load(args, validate=_flag(args, "validate"))
    config = redact_paths(result.config) if _flag(args, "sanitize") else result.config

    if _flag(args, "json"):
        _emit_json({"command": "load", **result.to_dict(), "config": config})
        return _diagnostic_exit(args, result)

    renderer = _get_renderer(args)
    renderer.kv("Environment", result.environment)
    if renderer.verbose:
        _render_summary(renderer, config, environment=result.environment)
    _render_diagnostics(renderer, result)
    renderer.section("Configuration:")
    renderer.text(json.dumps(config, indent=2, ensure_ascii=False))
    return _diagnostic_exit(args, result)


def _cmd_validate(args: argparse.Namespace) -> int:
    file_arg = _optional_str(getattr(args, "file_path", None))
    if file_arg is not None:
        return _validate_file(args, Path(file_arg))

    result = _load(args, validate=True)
    audit = _audit_secrets(result.environment)
    findings = list(audit.findings) if audit is not None else []
    valid = result.is_valid and not findings
    payload: dict[str, object] = {
        "command": "validate",
        "valid": valid,
        **result.to_dict(),
    }
    if audit is not None:
        payload["security_findings"] = findings
    if _flag(args, "json"):
        _emit_json(payload)
        return 0 if valid else 1

    renderer = _get_renderer(args)
    if not result.is_valid:
        renderer.fail("Configuration validation failed")
        renderer.items(list(result.validation_errors))
        renderer.items([f"Missing: {name}" for name in result.missing_env_vars])
    if findings:
        renderer.fail("Security audit failed")
        renderer.items(findings)
    if not valid:
        return 1

    renderer.ok("Configuration is valid")
    _render_warnings(renderer, result.warnings)
    _render_summary(renderer, result.config)
    return 0


def _audit_secrets(environment: str) -> SecretAuditReport | None:
    """Secret strength audit over the variables a production load would read."""

    if environment != "production":
        return None
    effective = _effective_env(ConfigLoader().registry.get_profile(environment))
    names = [definition.name for definition in env_var_definitions(environment)]
    return audit_secrets({name: effective.get(name) for name in names}, environment=environment)


def _validate_file(args: argparse.Namespace, path: Path) -> int:
    document = _read_document(path)
    outcome = asyncio.run(validate_config(document))

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "validate",
                "file": str(path),
                "valid": outcome.valid,
                "validation_errors": list(outcome.errors),
            }
        )
        return 0 if outcome.valid else 1

    renderer = _get_renderer(args)
    if not outcome.valid:
        renderer.fail(f"{path} failed validation")
        renderer.items(list(outcome.errors))
        return 1
    renderer.ok(f"{path} is valid")
    _render_summary(renderer, outcome.data or {})
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    fmt = _require_str(getattr(args, "format", None), "format")
    manager = ConfigManager(options=_load_options(args, validate=True))
    asyncio.run(manager.initialize())
    result = manager.load_result
    rendered = manager.export(fmt, redact=_flag(args, "sanitize"))

    if result is not None:
        _render_diagnostics_to_stderr(result)

    output = _optional_str(getattr(args, "output", None))
    if output is None:
        sys.stdout.write(rendered if rendered.endswith("\n") else rendered + "\n")
    else:
        target = Path(output).expanduser()
        try:
            target.write_text(rendered if rendered.endswith("\n") else rendered + "\n", "utf-8")
        except OSError as exc:
            raise CLIError(f"cannot write export to {target}: {exc}", exit_code=2) from exc
        _get_renderer(args, stream=sys.stderr).kv("Exported to", target)

    if result is None:
        return 0
    return _diagnostic_exit(args, result)


def _cmd_inspect(args: argparse.Namespace) -> int:
    result = _load(args, validate=False)
    config = redact_paths(result.config) if _flag(args, "sanitize") else result.config
    section_name = _optional_str(getattr(args, "section", None))

    if section_name is not None:
        section = config.get(section_name, MISSING)
        if section is MISSING or section is None:
            raise CLIError(f"section {section_name!r} not found in configuration", exit_code=1)
        if _flag(args, "json"):
            _emit_json({"command": "inspect", "section": section_name, "value": section})
            return 0
        renderer = _get_renderer(args)
        renderer.heading(f"{section_name} configuration ({result.environment}):")
        renderer.text(json.dumps(section, indent=2, ensure_ascii=False))
        return 0

    summary = config_summary(config, result.environment)
    if _flag(args, "json"):
        _emit_json({"command": "inspect", "summary": summary, **result.to_dict()})
        return _diagnostic_exit(args, result)

    renderer = _get_renderer(args)
    renderer.heading("Configuration Overview")
    renderer.text("=" * 50)
    _render_summary(renderer, config, environment=result.environment)
    _render_diagnostics(renderer, result)
    return _diagnostic_exit(args, result)


def _cmd_env(args: argparse.Namespace) -> int:
    environment, profile = _resolve_profile(args)
    definitions = env_var_definitions(environment)
    mode = getattr(args, "env_mode", "list")

    if mode == "template":
        sys.stdout.write(render_env_template(environment, profile.env_var_defaults))
        return 0

    if mode == "validate":
        report = validate_env_vars(definitions, _effective_env(profile))
        if _flag(args, "json"):
            _emit_json(
                {
                    "command": "env",
                    "environment": environment,
                    "valid": report.valid,
                    "errors": list(report.errors),
                }
            )
            return 0 if report.valid else 1
        renderer = _get_renderer(args)
        if not report.valid:
            renderer.fail(f"Environment variables for {environment} are invalid")
            renderer.items(list(report.errors))
            return 1
        renderer.ok(f"Environment variables for {environment} are valid")
        return 0

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "env",
                "environment": environment,
                "variables": [
                    {
                        "name": definition.name,
                        "type": definition.type,
                        "required": definition.required,
                        "default": definition.default if definition.has_default else None,
                        "description": definition.description,
                    }
                    for definition in definitions
                ],
            }
        )
        return 0

    renderer = _get_renderer(args)
    renderer.heading(f"Environment variables for {environment}")
    renderer.table(
        ("Name", "Type", "Required", "Default", "Description"),
        [
            (
                definition.name,
                definition.type,
                "yes" if definition.required else "no",
                format_env_value(definition.default) if definition.has_default else "",
                definition.description or "",
            )
            for definition in definitions
        ],
    )
    return 0


def _cmd_init(args: argparse.Namespace) -> int:
    environment, profile = _resolve_profile(args)

    directory = Path(_require_str(getattr(args, "directory", None), "directory")).expanduser()
    if not directory.is_dir():
        raise CLIError(f"not a directory: {directory}", exit_code=2)
    target = directory / f".env.{environment}"
    if target.exists() and not _flag(args, "force"):
        raise CLIError(f"{target} already exists; use --force to overwrite", exit_code=1)

    content = render_env_template(environment, profile.env_var_defaults)
    target.write_text(content, encoding="utf-8")

    renderer = _get_renderer(args)
    renderer.ok(f"Environment file created: {target}")
    profile_required = set(profile.required_env_vars)
    required = [
        definition.name
        for definition in env_var_definitions(environment)
        if (definition.required or definition.name in profile_required)
        and not definition.has_default
        and is_blank(profile.env_var_defaults.get(definition.name))
    ]
    if required:
        renderer.section("Fill in before loading:")
        renderer.items(required)
    renderer.next_steps([f"confstack validate --env {environment}"])
    return 0


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def config_summary(tree: Mapping[str, Any], environment: str | None = None) -> dict[str, Any]:
    """Feature, service, and security overview of a configuration tree."""

    database_url = get_path(tree, "database.url")
    database = (
        urlsplit(database_url).scheme or "unknown"
        if isinstance(database_url, str) and database_url
        else "unknown"
    )
    return {
        "environment": get_path(tree, "env.NODE_ENV", environment),
        "features": {
            name: get_path(tree, f"features.{name}", False) is True for name in SUMMARY_FEATURES
        },
        "services": {
            "database": database,
            "email": get_path(tree, "email.provider", "unknown"),
            "storage": get_path(tree, "storage.provider", "unknown"),
            "billing": get_path(tree, "billing.provider", "unknown"),
            "cache": "redis" if get_path(tree, "cache.redis.enabled", False) is True else "memory",
        },
        "security": {
            name: get_path(tree, dotted, False) is True for name, dotted in SUMMARY_SECURITY
        },
    }


def render_env_template(environment: str, env_var_defaults: Mapping[str, str]) -> str:
    """``.env`` template text listing every known variable for ``environment``."""

    generated = datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")
    lines = [
        f"# Environment Variables for {environment}",
        f"# Generated on {generated}",
        "",
    ]
    for definition in env_var_definitions(environment):
        if definition.description:
            lines.append(f"# {definition.description}")
        lines.append(
            f"# Type: {definition.type}, Required: {str(definition.required).lower()}"
        )
        value = env_var_defaults.get(definition.name)
        if value is None and definition.has_default:
            value = format_env_value(definition.default)
        lines.append(f"{definition.name}={value or ''}")
        lines.append("")
    return "\n".join(lines)


def _resolve_profile(args: argparse.Namespace) -> tuple[str, ConfigProfile]:
    registry = ConfigLoader().registry
    environment = resolve_environment(
        _optional_str(getattr(args, "environment", None)),
        os.environ,
        registry.environments,
    )
    return environment, registry.get_profile(environment)


def _effective_env(profile: ConfigProfile) -> dict[str, str]:
    """Profile variable defaults overlaid with the process environment."""

    return {**profile.env_var_defaults, **os.environ}


def _load(args: argparse.Namespace, *, validate: bool) -> LoadResult:
    loader = ConfigLoader()
    return asyncio.run(loader.load(_load_options(args, validate=validate)))


def _load_options(args: argparse.Namespace, *, validate: bool) -> LoadOptions:
    return LoadOptions(
        environment=_optional_str(getattr(args, "environment", None)),
        validate=validate,
        throw_on_error=False,
        strict=_flag(args, "strict"),
    )


def _diagnostic_exit(args: argparse.Namespace, result: LoadResult) -> int:
    if _flag(args, "strict") and not result.is_valid:
        return 1
    return 0


def _read_document(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"cannot read {path}: {exc}", exit_code=2) from exc
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            document = yaml.safe_load(text)
        else:
            document = json.loads(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise CLIError(f"cannot parse {path}: {exc}", exit_code=2) from exc
    if not isinstance(document, dict):
        raise CLIError(f"{path} must contain a mapping at the top level", exit_code=2)
    return document


def _configure_logging(args: argparse.Namespace) -> None:
    level = _optional_str(getattr(args, "log_level", None))
    if level is None:
        level = _optional_str(os.environ.get(LOG_LEVEL_VARIABLE)) or DEFAULT_LOG_LEVEL
    log_format = _optional_str(getattr(args, "log_format", None)) or "json"
    try:
        setup_logging(level, log_format=log_format, stream=sys.stderr)
    except ValueError as exc:
        raise CLIError(str(exc), exit_code=2) from exc


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace, *, stream: Any = None) -> CLIRenderer:
    """Create a CLI renderer from the parsed namespace."""

    no_color = _flag(args, "no_color")
    verbose = _flag(args, "verbose")
    return create_renderer(no_color=no_color, verbose=verbose, stream=stream)


def _render_diagnostics(renderer: CLIRenderer, result: LoadResult) -> None:
    if result.validation_errors:
        renderer.section("Validation Errors:")
        renderer.items(list(result.validation_errors))
    if result.missing_env_vars:
        renderer.section("Missing Environment Variables:")
        renderer.items(list(result.missing_env_vars))
    _render_warnings(renderer, result.warnings)


def _render_diagnostics_to_stderr(result: LoadResult) -> None:
    for error in result.validation_errors:
        print(f"error: {error}", file=sys.stderr)
    for name in result.missing_env_vars:
        print(f"error: missing environment variable {name}", file=sys.stderr)
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)


def _render_warnings(renderer: CLIRenderer, warnings: Sequence[str]) -> None:
    if not warnings:
        return
    renderer.section("Warnings:")
    for warning in warnings:
        renderer.warning(warning)


def _render_summary(
    renderer: CLIRenderer, tree: Mapping[str, Any], *, environment: str | None = None
) -> None:
    summary = config_summary(tree, environment)
    renderer.kv("Environment", summary["environment"])
    renderer.section("Features:")
    for name, enabled in summary["features"].items():
        (renderer.ok if enabled else renderer.fail)(name)
    renderer.table(
        ("Service", "Provider"),
        [(name, str(provider)) for name, provider in summary["services"].items()],
        title="Services:",
    )
    renderer.section("Security:")
    for name, enabled in summary["security"].items():
        (renderer.ok if enabled else renderer.fail)(name)


def _require_str(value: object, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise CLIError(f"{name} is required", exit_code=2)
    return value.strip()


def _optional_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    value = getattr(args, name, False)
    return bool(value)


__all__ = [
    "CLIError",
    "build_parser",
    "config_summary",
    "main",
    "render_env_template",
    "run_cli",
]
