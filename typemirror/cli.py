"""
Command-line interface for typemirror.

Usage:
    typemirror generate schema.json --profile flattened -o types.ts
    typemirror generate schema.json --config targets.json
    typemirror profiles
    typemirror languages
"""

import argparse
import json
import logging
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from .core.config import TIMESTAMP_ALIAS_OVERRIDE, ConfigError, get_config_manager, load_target_configs
from .core.errors import GeneratorError
from .core.generator import CodeGenerator, GenerationResult, generate_code
from .core.loader import load_schema_file
from .logging_config import configure_logging, get_logger
from .registry import RegistryError, get_generator, get_language_info, list_supported_languages
from .writer import WriterError, render_file, write_output

logger = get_logger(__name__)

# Initialize rich consoles
console = Console()
error_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="typemirror",
        description="Generate TypeScript type declarations from a schema document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  typemirror generate schema.json
  typemirror generate schema.json --profile flattened -o types.ts
  typemirror generate schema.json --flatten --prefix Flat_ --timestamp-mode alias
  typemirror generate schema.json --config targets.json
  typemirror profiles
        """.strip(),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate declarations from a schema document")
    generate.add_argument("schema", help="JSON schema document")
    generate.add_argument("--profile", "-p", default="default", help="Built-in profile (default: default)")
    generate.add_argument("--config", "-c", metavar="FILE", help="JSON configuration file, optionally with a targets list")
    generate.add_argument("--language", "-l", default="typescript", help="Target language (default: typescript)")
    generate.add_argument("--output", "-o", metavar="FILE", help="Output file (default: stdout)")
    generate.add_argument("--verbose", "-v", action="store_true", help="Debug logging and generation metadata")

    flatten_group = generate.add_argument_group("flattening options")
    flatten_group.add_argument("--flatten", action="store_true", default=None, help="Inline nested struct fields")
    flatten_group.add_argument("--prefix", metavar="PREFIX", help="Prefix for every emitted identifier")
    flatten_group.add_argument(
        "--collision-strategy",
        choices=["error", "rename"],
        help="What to do when flattening produces duplicate field names",
    )

    output_group = generate.add_argument_group("output options")
    output_group.add_argument(
        "--timestamp-mode",
        choices=["inline", "alias"],
        help="Render timestamps inline or through one generated alias",
    )
    output_group.add_argument("--export", action="store_true", default=None, help="Export every declaration")
    output_group.add_argument("--no-comments", action="store_true", help="Don't emit doc comments")

    subparsers.add_parser("profiles", help="List built-in configuration profiles")
    subparsers.add_parser("languages", help="List supported target languages")

    return parser


def build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect configuration overrides given on the command line."""
    overrides: Dict[str, Any] = {}

    if args.flatten:
        overrides["flatten"] = True
    if args.prefix is not None:
        overrides["type_prefix"] = args.prefix
    if args.collision_strategy:
        overrides["collision_strategy"] = args.collision_strategy
    if args.export:
        overrides["export_types"] = True
    if args.no_comments:
        overrides["add_comments"] = False
    if args.output:
        overrides["output_file"] = args.output

    if args.timestamp_mode == "alias":
        overrides["scalar_overrides"] = {"timestamp": dict(TIMESTAMP_ALIAS_OVERRIDE)}
    elif args.timestamp_mode == "inline":
        overrides["scalar_overrides"] = {"timestamp": {"mode": "inline", "target": "string"}}

    return overrides


def _handle_generate(args: argparse.Namespace) -> int:
    try:
        configs = load_target_configs(args.profile, custom_config=build_overrides(args), config_file=args.config)
        graph = load_schema_file(args.schema)
        generators = [get_generator(args.language, config) for config in configs]
    except (ConfigError, RegistryError, GeneratorError) as e:
        logger.error("%s", e)
        error_console.print(f"[red]✗ Error:[/red] {escape(str(e))}", soft_wrap=True)
        return 1

    # Every target must succeed before anything is written
    results = []
    for generator in generators:
        result = generate_code(generator, graph)
        if not result.success:
            target = generator.config.output_file or generator.language_name
            error_console.print(f"[red]✗ {escape(target)}: {escape(result.error_message)}[/red]", soft_wrap=True)
            return 1
        results.append((generator, result))

    for generator, result in results:
        if not _save_result(generator, result):
            return 1

        if args.verbose:
            _print_metadata(result)

        if result.warnings:
            error_console.print("[yellow]⚠️  Warnings:[/yellow]")
            for warning in result.warnings:
                error_console.print(f"  [yellow]•[/yellow] {escape(warning)}", soft_wrap=True)

    return 0


def _save_result(generator: CodeGenerator, result: GenerationResult) -> bool:
    """Write one result to its output file, or to stdout when it has none."""
    config = generator.config
    content = render_file(generator.header, result.code, config.line_ending)

    if not config.output_file:
        if console.is_terminal:
            console.print(Syntax(content, generator.language_name, theme="monokai"))
        else:
            # Raw write, rich would expand tabs
            console.file.write(content)
        return True

    try:
        written = write_output(config.output_file, content)
    except WriterError as e:
        logger.error("%s", e)
        error_console.print(f"[red]✗ Error:[/red] {escape(str(e))}", soft_wrap=True)
        return False

    if written:
        console.print(f"[green]✓[/green] Generated {generator.language_name} code saved to [cyan]{config.output_file}[/cyan]", soft_wrap=True)
    else:
        console.print(f"[green]✓[/green] [cyan]{config.output_file}[/cyan] is up to date", soft_wrap=True)
    return True


def _print_metadata(result: GenerationResult):
    metadata_table = Table(
        title="📊 Generation Metadata",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    metadata_table.add_column("Property", style="bold")
    metadata_table.add_column("Value", style="green")

    for key, value in result.metadata.items():
        if isinstance(value, list):
            value = ", ".join(value) or "-"
        metadata_table.add_row(key.replace("_", " ").title(), str(value))

    error_console.print(metadata_table)


def _handle_profiles(args: argparse.Namespace) -> int:
    manager = get_config_manager()

    table = Table(title="⚙️  Configuration Profiles", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Profile", style="bold green", no_wrap=True)
    table.add_column("Settings", style="dim")

    for name in manager.list_profiles():
        settings = json.dumps(manager.get_profile(name), sort_keys=True)
        table.add_row(name, settings)

    console.print(table)
    return 0


def _handle_languages(args: argparse.Namespace) -> int:
    table = Table(title="📋 Supported Languages", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Language", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Generator Class", style="dim")
    table.add_column("Aliases", style="blue")

    for language in list_supported_languages():
        info = get_language_info(language)
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(language, info["file_extension"], info["class"], aliases)

    console.print(table)
    console.print(
        Panel(
            "[bold]Usage:[/bold] typemirror generate [dim]schema.json[/dim] --language [cyan]LANGUAGE[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


HANDLERS = {
    "generate": _handle_generate,
    "profiles": _handle_profiles,
    "languages": _handle_languages,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI.

    Returns:
        Exit code: 0 on success, 1 on a generation error. Argument errors
        exit with status 2 through argparse.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING)
    return HANDLERS[args.command](args)
