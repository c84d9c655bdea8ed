"""Command-line interface for the environment builder.

Usage:
    envbuilder render [--file env.yaml] [--set compute.nodeCount=5] [--tag owner=ops]
    envbuilder simulate [--file env.yaml] [--destroy]

Lifecycle delays are read from ENVBUILDER_* environment variables (a .env
file in the working directory is loaded first).
"""

# ruff: noqa: T201 (print is the correct output mechanism for a CLI)

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from envbuilder.config import BuilderSettings
from envbuilder.controller import EnvironmentController
from envbuilder.environment import UpdateResult
from envbuilder.models import LifecycleEvent
from envbuilder.template import write_document


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="envbuilder",
        description="Build a multi-cloud environment document and simulate its lifecycle.",
    )
    sub = parser.add_subparsers(dest="command")

    render_p = sub.add_parser("render", help="Print the environment document")
    render_p.add_argument("--file", type=Path, help="Start from an exported document")
    render_p.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Set a field; dotted paths update one key of a section (repeatable)",
    )
    render_p.add_argument(
        "--tag",
        dest="tags",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Insert or overwrite a tag (repeatable)",
    )
    render_p.add_argument("--format", choices=["json", "yaml"], default="json")
    render_p.add_argument("--output", type=Path, help="Write to a file instead of stdout")

    sim_p = sub.add_parser("simulate", help="Simulate provisioning the environment")
    sim_p.add_argument("--file", type=Path, help="Start from an exported document")
    sim_p.add_argument(
        "--destroy",
        action="store_true",
        help="Destroy the environment again once it is deployed",
    )

    return parser


def _split(pair: str, flag: str) -> tuple[str, str]:
    key, sep, value = pair.partition("=")
    if not sep or not key:
        raise SystemExit(f"ERROR: {flag} expects KEY=VALUE, got {pair!r}")
    return key.strip(), value


def apply_assignment(controller: EnvironmentController, assignment: str) -> UpdateResult:
    """Apply one FIELD=VALUE or SECTION.KEY=VALUE assignment.

    Values are parsed as YAML, so `3` becomes an int and `{nodeCount: 5}` a mapping.
    `tags.KEY=VALUE` goes through update_tag and keeps VALUE as a string.
    """
    path, raw = _split(assignment, "--set")
    section, _, key = path.partition(".")
    if key and section == "tags":
        return controller.update_tag(key, raw)
    value = yaml.safe_load(raw) if raw else ""
    if key:
        current = getattr(controller.config, _snake(section), None)
        if current is None or not hasattr(current, "model_dump"):
            return controller.update(path, value)
        merged = current.model_dump()
        merged[_snake(key)] = value
        return controller.update(section, merged)
    return controller.update(section, value)


def _snake(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name)


def _report(result: UpdateResult) -> bool:
    for issue in result.errors:
        print(f"ERROR: {issue.field}: {issue.message}", file=sys.stderr)
    return result.ok


def _load_controller(path: Path | None, settings: BuilderSettings) -> EnvironmentController:
    if path is None:
        return EnvironmentController(settings=settings)
    try:
        return EnvironmentController.from_document(path, settings)
    except (OSError, yaml.YAMLError, ValidationError) as exc:
        print(f"ERROR: cannot load {path}: {exc}", file=sys.stderr)
        sys.exit(1)


def _cmd_render(args: argparse.Namespace, settings: BuilderSettings) -> int:
    controller = _load_controller(args.file, settings)

    ok = True
    for assignment in args.assignments:
        ok = _report(apply_assignment(controller, assignment)) and ok
    for pair in args.tags:
        key, value = _split(pair, "--tag")
        ok = _report(controller.update_tag(key, value)) and ok
    if not ok:
        return 1

    if args.output:
        path = write_document(args.output, controller.render(), args.format)
        print(f"Wrote {path}")
    else:
        print(controller.preview(args.format), end="")
    return 0


def _print_event(event: LifecycleEvent) -> None:
    line = f"[{event.status.label}] {event.title}"
    if event.description:
        line += f": {event.description}"
    print(line, flush=True)


async def _simulate(controller: EnvironmentController, destroy: bool) -> None:
    controller.subscribe(_print_event)
    controller.provision()
    await controller.wait()
    if destroy:
        controller.destroy()
        await controller.wait()


def _cmd_simulate(args: argparse.Namespace, settings: BuilderSettings) -> int:
    controller = _load_controller(args.file, settings)
    print(f"Environment {controller.config.name} ({controller.config.provider})")
    asyncio.run(_simulate(controller, args.destroy))
    print(f"Final status: {controller.status.label}")
    return 0


def main(argv: list[str] | None = None) -> None:
    from dotenv import load_dotenv

    load_dotenv()

    debug = bool(os.environ.get("ENVBUILDER_DEBUG"))
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("envbuilder").setLevel(logging.DEBUG if debug else logging.INFO)

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        settings = BuilderSettings.from_env()
    except ValidationError as exc:
        print(f"ERROR: invalid ENVBUILDER_* settings: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.command == "render":
        sys.exit(_cmd_render(args, settings))
    sys.exit(_cmd_simulate(args, settings))
