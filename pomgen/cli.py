"""CLI entrypoints for pomgen commands."""

from __future__ import annotations

import argparse
import sys
import threading
from pathlib import Path
from typing import Any, Dict

from .logging import configure_logging
from .models import GenerationRequest, GenerationResult
from .orchestrator import Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_generation_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        help="Directory for generated files (defaults to <path>/e2e or the configured output_directory).",
    )
    parser.add_argument(
        "--header",
        help="File header template; supports {FileName}, {GeneratedDate} and {ToolVersion}.",
    )
    parser.add_argument(
        "--test-suffix",
        help="Suffix for generated test files, e.g. 'spec' or 'e2e'.",
    )


def _add_path_argument(parser: argparse.ArgumentParser, what: str) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help=f"Path to the Angular {what} (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pomgen",
        description="Generate Playwright page objects, fixtures and test stubs from Angular sources.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write timestamped log lines to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    app_parser = subparsers.add_parser(
        "app",
        help="Generate scaffolding for an Angular application.",
    )
    _add_verbose_option(app_parser, suppress_default=True)
    _add_path_argument(app_parser, "application or workspace")
    _add_generation_options(app_parser)
    app_parser.add_argument("-p", "--project", help="Project to use when the path is a workspace.")

    lib_parser = subparsers.add_parser(
        "lib",
        help="Generate scaffolding for an Angular library.",
    )
    _add_verbose_option(lib_parser, suppress_default=True)
    _add_path_argument(lib_parser, "library or workspace")
    _add_generation_options(lib_parser)
    lib_parser.add_argument("-p", "--project", help="Library project to use when the path is a workspace.")

    workspace_parser = subparsers.add_parser(
        "workspace",
        help="Generate scaffolding for every application in an Angular workspace.",
    )
    _add_verbose_option(workspace_parser, suppress_default=True)
    _add_path_argument(workspace_parser, "workspace")
    _add_generation_options(workspace_parser)
    workspace_parser.add_argument("-p", "--project", help="Only generate this project.")
    workspace_parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of projects to process in parallel.",
    )

    artifacts_parser = subparsers.add_parser(
        "artifacts",
        help="Generate only selected artifact kinds.",
    )
    _add_verbose_option(artifacts_parser, suppress_default=True)
    _add_path_argument(artifacts_parser, "application or workspace")
    _add_generation_options(artifacts_parser)
    artifacts_parser.add_argument("-p", "--project", help="Project to use when the path is a workspace.")
    artifacts_parser.add_argument("--base", action="store_true", help="Generate the base page class.")
    artifacts_parser.add_argument("--page-objects", action="store_true", help="Generate page object files.")
    artifacts_parser.add_argument("--selectors", action="store_true", help="Generate selector constant files.")
    artifacts_parser.add_argument("--fixtures", action="store_true", help="Generate the fixtures file.")
    artifacts_parser.add_argument("--configs", action="store_true", help="Generate timeout and route config files.")
    artifacts_parser.add_argument("--tests", action="store_true", help="Generate test stubs.")
    artifacts_parser.add_argument("-a", "--all", action="store_true", help="Generate every artifact kind.")

    mock_parser = subparsers.add_parser(
        "signalr-mock",
        help="Write the standalone SignalR hub connection mock fixture.",
    )
    _add_verbose_option(mock_parser, suppress_default=True)
    mock_parser.add_argument(
        "output",
        nargs="?",
        default=".",
        help="Directory to write signalr-mock.fixture.ts into (defaults to current directory).",
    )
    mock_parser.add_argument("--header", help="File header template.")

    remote_parser = subparsers.add_parser(
        "remote",
        help="Clone a git repository and generate scaffolding from it.",
    )
    _add_verbose_option(remote_parser, suppress_default=True)
    remote_parser.add_argument("url", help="Repository URL (GitHub, GitLab, Bitbucket, Azure DevOps or plain git).")
    _add_generation_options(remote_parser)
    remote_parser.add_argument("-p", "--project", help="Project to use when the repository is a workspace.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "file_header": getattr(args, "header", None),
        "test_file_suffix": getattr(args, "test_suffix", None),
    }


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for pomgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
        return

    orchestrator = Orchestrator(
        overrides=_overrides(args),
        max_workers=max(1, int(getattr(args, "workers", 1) or 1)),
    )
    cancel = threading.Event()

    try:
        if args.command == "app":
            result = orchestrator.run_application(
                args.path, args.output, project=args.project, cancel=cancel
            )
        elif args.command == "lib":
            result = orchestrator.run_library(
                args.path, args.output, project=args.project, cancel=cancel
            )
        elif args.command == "workspace":
            result = orchestrator.run_workspace(
                args.path, args.output, project=args.project, cancel=cancel
            )
        elif args.command == "artifacts":
            request = GenerationRequest(
                path=args.path,
                output=args.output,
                project=args.project,
                base=args.base,
                page_objects=args.page_objects,
                selectors=args.selectors,
                fixtures=args.fixtures,
                configs=args.configs,
                tests=args.tests,
                all=args.all,
            )
            result = orchestrator.run_artifacts(request, cancel=cancel)
        elif args.command == "signalr-mock":
            result = orchestrator.run_realtime_mock(args.output)
        elif args.command == "remote":
            result = orchestrator.run_remote(
                args.url, args.output, project=args.project, cancel=cancel
            )
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except KeyboardInterrupt:
        cancel.set()
        parser.exit(1, "pomgen interrupted\n")

    _report(result)
    if not result.success:
        message = "\n".join(result.errors)
        parser.exit(1, f"pomgen {args.command} failed:\n{message}\nRun with --verbose for more details.\n")


def _report(result: GenerationResult) -> None:
    for artifact in result.artifacts:
        print(f"  {_relativize(Path(artifact.path))}")
    for warning in result.warnings:
        print(f"warning: {warning}")
    counts = result.counts
    print(
        f"{counts['produced']} file(s) generated, {counts['warned']} warning(s), {counts['failed']} error(s)"
    )


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
