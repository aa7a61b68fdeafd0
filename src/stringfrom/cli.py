"""Command line entry point: ``stringfrom --in decls.yaml --out errors_gen.py``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ruamel.yaml.error import YAMLError

from stringfrom import __version__
from stringfrom.compiler.module import extract_digest, render_module
from stringfrom.compiler.pipeline import DocumentError, GenerationPipeline
from stringfrom.compiler.syntax import check_syntax
from stringfrom.parser.loader import TrackedLoader, YAMLSafetyError
from stringfrom.reporter import DiagnosticReporter
from stringfrom.settings import Settings

logger = logging.getLogger("stringfrom.cli")


def _source_label(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd().resolve()))
    except ValueError:
        return str(path.resolve())


def run(args: argparse.Namespace, settings: Settings | None = None) -> int:
    settings = settings or Settings()
    in_path = Path(args.input)
    out_path = Path(args.output)

    if not in_path.exists():
        print(f"error: input file does not exist: {in_path}", file=sys.stderr)
        return 1

    source_bytes = in_path.read_bytes()
    try:
        raw, source_map = TrackedLoader().load_string(
            source_bytes.decode("utf-8"), filename=str(in_path)
        )
        result = GenerationPipeline.from_settings(settings).generate_document(raw, source_map)
    except (YAMLSafetyError, YAMLError, DocumentError, UnicodeDecodeError) as exc:
        print(f"{in_path}: error: {exc}", file=sys.stderr)
        return 1

    status = 0
    if DiagnosticReporter().report(result.diagnostics):
        status = 1
    for generation in result.results:
        for warning in generation.warnings:
            print(f"{in_path}: warning: {generation.declaration}: {warning}", file=sys.stderr)

    rendered = render_module(result, _source_label(in_path), source_bytes)
    for problem in check_syntax(rendered, str(out_path)):
        print(f"{out_path}: warning: Syntax check: {problem}", file=sys.stderr)

    if args.check:
        if not out_path.exists():
            print(f"{out_path} is missing (run generator)", file=sys.stderr)
            return 1
        if out_path.read_text(encoding="utf-8") != rendered:
            print(f"{out_path} is out of date (run generator)", file=sys.stderr)
            return 1
        print(f"up-to-date: {out_path}")
        return status

    if out_path.exists():
        existing = out_path.read_text(encoding="utf-8")
        old_digest = extract_digest(existing)
        if existing == rendered or (old_digest and old_digest == extract_digest(rendered)):
            print(f"unchanged: {out_path}")
            return status

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(rendered, encoding="utf-8")
    print(f"generated: {out_path}")
    return status


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stringfrom",
        description="Generate error conversion functions from annotated union declarations",
    )
    parser.add_argument("--in", dest="input", required=True, help="Input declaration YAML file")
    parser.add_argument("--out", dest="output", required=True, help="Output Python module")
    parser.add_argument("--check", action="store_true", help="Check output is up to date")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())
    args = build_arg_parser().parse_args(argv)
    logger.info("stringfrom v%s generating %s", __version__, args.input)
    return run(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
