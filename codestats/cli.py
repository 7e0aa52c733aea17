"""Command line interface: ``codestats analyze``, ``codestats deps`` and ``codestats languages``."""

import argparse
import json
import sys
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .analyzer import analyze_file
from .config import AnalyzerConfig, apply_env_overrides, find_config, load_config
from .errors import CodeStatsError
from .language_router import FILE_EXTENSIONS, LANGUAGE_TAGS, supported_languages
from .models import StructuralSummary

console = Console()

STATUS_STYLES = {"installed": "green", "missing": "red", "unknown": "yellow"}


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def resolve_config(args: argparse.Namespace) -> AnalyzerConfig:
    """Explicit ``--config`` file, else the nearest config file, else defaults."""
    if args.config:
        config = load_config(Path(args.config))
    else:
        found = find_config(Path(args.path).resolve())
        config = load_config(found) if found else apply_env_overrides(AnalyzerConfig())
    if getattr(args, "verify", False):
        config.verify_dependencies = True
    return config


def print_summary(summary: StructuralSummary) -> None:
    console.print(
        Panel(
            f"[bold cyan]{escape(summary.file_name)}[/bold cyan] ({summary.language})\n{escape(summary.description)}",
            style="cyan",
        )
    )
    console.print(
        f"Lines: [green]{summary.code_lines}[/green] code / {summary.total_lines} total, "
        f"[blue]{len(summary.imports)}[/blue] imports, [blue]{len(summary.types)}[/blue] types, "
        f"[blue]{len(summary.callables)}[/blue] functions"
    )

    if summary.types:
        table = Table(title="Types")
        table.add_column("Name", style="cyan")
        table.add_column("Line", style="dim")
        table.add_column("Bases", style="yellow")
        table.add_column("Methods", style="green")
        table.add_column("Attributes", style="blue")
        for type_decl in summary.types:
            table.add_row(
                escape(type_decl.name),
                str(type_decl.line_number),
                escape(", ".join(type_decl.bases)),
                escape(", ".join(m.name for m in type_decl.methods)),
                escape(", ".join(a.name for a in type_decl.attributes)),
            )
        console.print(table)

    callables = summary.all_callables()
    if callables:
        table = Table(title="Callables")
        table.add_column("Name", style="cyan")
        table.add_column("Line", style="dim")
        table.add_column("Params", style="yellow")
        table.add_column("Returns", style="green")
        table.add_column("Complexity", style="red")
        for func in callables:
            prefix = "async " if func.is_async else ""
            table.add_row(
                escape(prefix + func.name),
                str(func.line_number),
                escape(", ".join(p.name for p in func.params)),
                escape(func.return_type),
                str(func.complexity),
            )
        console.print(table)

    if summary.hardcoded:
        console.print("\n[bold]Hardcoded values:[/bold]")
        for item in summary.hardcoded:
            console.print(f"  • line {item.line_number} [red]{item.kind}[/red] {escape(item.context)}: {escape(item.value)}")

    if summary.unused:
        console.print("\n[bold]Unused:[/bold]")
        for item in summary.unused:
            console.print(f"  • line {item.line_number} {item.kind} [yellow]{escape(item.name)}[/yellow]")

    if summary.markers:
        console.print("\n[bold]Markers:[/bold]")
        for marker in summary.markers:
            console.print(f"  • line {marker.line_number} [magenta]{marker.kind}[/magenta] {escape(marker.text)}")

    for warning in summary.warnings:
        console.print(f"[yellow]Warning: {escape(warning)}[/yellow]")

    if summary.dependency_issues:
        print_dependencies(summary)

    if summary.external_usage:
        console.print("\n[bold]Used from other files:[/bold]")
        for usage in summary.external_usage:
            console.print(f"  • {usage.kind} [cyan]{escape(usage.name)}[/cyan]: {escape(', '.join(usage.used_in))}")


def print_dependencies(summary: StructuralSummary) -> None:
    if not summary.dependency_issues:
        console.print("No external dependencies found")
        return
    table = Table(title="Dependencies")
    table.add_column("Package", style="cyan")
    table.add_column("Line", style="dim")
    table.add_column("Status")
    table.add_column("Install", style="dim")
    for issue in summary.dependency_issues:
        style = STATUS_STYLES.get(issue.status, "white")
        table.add_row(
            escape(issue.name),
            str(issue.line_number),
            f"[{style}]{issue.status}[/{style}]",
            escape(issue.install_hint or ""),
        )
    console.print(table)


def cmd_analyze(args: argparse.Namespace) -> int:
    config = resolve_config(args)
    configure_logging(args.log_level or config.log_level)
    summary = analyze_file(
        Path(args.path),
        language=args.language,
        config=config,
        workspace_root=Path(args.workspace) if args.workspace else None,
        check_deps=args.deps,
    )
    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary(summary)
    return 0


def cmd_deps(args: argparse.Namespace) -> int:
    config = resolve_config(args)
    configure_logging(args.log_level or config.log_level)
    summary = analyze_file(Path(args.path), language=args.language, config=config, check_deps=True)
    if args.json:
        print(json.dumps([issue.__dict__ for issue in summary.dependency_issues], indent=2))
    else:
        print_dependencies(summary)
    return 1 if any(issue.status == "missing" for issue in summary.dependency_issues) else 0


def cmd_languages(args: argparse.Namespace) -> int:
    table = Table(title="Supported Languages")
    table.add_column("Tag", style="cyan")
    table.add_column("Family", style="yellow")
    table.add_column("Extensions", style="green")
    for tag in supported_languages():
        extensions = [ext for ext, lang in FILE_EXTENSIONS.items() if lang == tag]
        table.add_row(tag, LANGUAGE_TAGS[tag], ", ".join(extensions))
    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codestats", description="Heuristic structural statistics for source files")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("path", help="File to analyze")
    common.add_argument("--language", "-l", help="Language tag (default: from the file extension)")
    common.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    common.add_argument("--verify", action="store_true", help="Verify dependencies with the local toolchain")
    common.add_argument("--config", help="Configuration file (.yml, .yaml or .toml)")
    common.add_argument("--log-level", help="Log level (default: from configuration)")

    analyze = subparsers.add_parser("analyze", parents=[common], help="Analyze a source file")
    analyze.add_argument("--deps", action="store_true", help="Check the install status of external imports")
    analyze.add_argument("--workspace", help="Workspace root to scan for external usage")
    analyze.set_defaults(func=cmd_analyze)

    deps = subparsers.add_parser("deps", parents=[common], help="Check dependencies of a source file")
    deps.set_defaults(func=cmd_deps)

    languages = subparsers.add_parser("languages", help="List supported language tags")
    languages.set_defaults(func=cmd_languages)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except CodeStatsError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
