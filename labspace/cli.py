"""CLI entrypoints for labspace commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .errors import AnalysisError, InvalidInput
from .logging import configure_logging
from .models import profile_to_dict
from .orchestrator import Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_reference_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "reference",
        help="GitHub repository URL or owner/name shorthand.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="labspace",
        description="Generate ready-to-run development environments for GitHub repositories.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .labspace.yml file or the directory containing it.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Detect the tech stack and services of a repository.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_reference_argument(analyze_parser)
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full analysis as JSON.",
    )

    generate_parser = subparsers.add_parser(
        "generate",
        help="Analyze a repository and produce its labspace files.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_reference_argument(generate_parser)
    generate_parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory receiving the files or the zip bundle (defaults to current directory).",
    )
    generate_parser.add_argument(
        "--zip",
        action="store_true",
        help="Package the files into a zip bundle instead of writing them out.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP API.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default=None, help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for labspace commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=args.quiet, log_file=args.log_file)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "serve":
        from .service import run_service

        run_service(
            host=args.host or config.service.host,
            port=args.port or config.service.port,
            config=config,
        )
        return

    orchestrator = Orchestrator(config=config)
    try:
        profile = orchestrator.analyze(args.reference)
    except InvalidInput as exc:
        parser.exit(1, f"{exc}\n")
    except AnalysisError as exc:
        parser.exit(1, f"labspace {args.command} failed: {exc}\nRun with --verbose for more details.\n")

    if args.command == "analyze":
        if args.json:
            print(json.dumps(profile_to_dict(profile), indent=2, ensure_ascii=False))
            return
        print(f"Repository: {profile.repository.full_name}")
        for entry in profile.tech_stack:
            print(f"  {entry.icon} {entry.name} ({entry.version})")
        for service in profile.services:
            print(f"  service {service.name} on port {service.port}")
        print(f"Estimated setup time: {profile.estimated_setup_time}")
    elif args.command == "generate":
        if args.zip:
            outcome = orchestrator.build_bundle(profile, args.output_dir)
            print(f"Labspace bundle created at {_relativize(outcome.path)}")
        else:
            written = orchestrator.export(profile, args.output_dir)
            for path in written:
                print(_relativize(path))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
