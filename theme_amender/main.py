"""
Theme Amender — command line

Usage:
  theme-amender init acme
  theme-amender parse "make brand colors warmer and increase spacing slightly"
  theme-amender amend acme "compact" --dry-run
  theme-amender amend acme "make notifications friendlier" --scope notifications --mode regen
  theme-amender amend acme "blue and gray theme" --render outputs/acme_palettes.png
  theme-amender generate acme "calm fintech dashboard, deep greens"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from typing import List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .amender import AmendmentRejected, AmendmentResult, ThemeAmender
from .cache import AmendmentCache
from .config import AmenderSettings
from .defaults import default_theme
from .generator import GeminiThemeGenerator, GeneratorError
from .instruction_parser import parse_instructions
from .operations import dump_operations
from .schema import TokenSchemaError
from .scope import SCOPE_PATHS
from .store import JsonThemeStore, ThemeNotFoundError
from .swatches import save_palette_diff

logging.basicConfig(
    format="%(asctime)s — %(levelname)s — %(name)s — %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)
audit = logging.getLogger("theme_amender.audit")

console = Console()


# ── CLI ───────────────────────────────────────────────────────────────────────

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Theme Amender: edit design-token themes with plain-language instructions"
    )
    parser.add_argument(
        "--store",
        default=None,
        help="Theme directory (default: $THEME_AMENDER_STORE_DIR or ./themes)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_amend = sub.add_parser("amend", help="Apply an instruction to a stored theme")
    p_amend.add_argument("theme_id")
    p_amend.add_argument("instruction")
    p_amend.add_argument("--dry-run", action="store_true", help="Preview the diff, save nothing")
    p_amend.add_argument(
        "--scope",
        nargs="+",
        choices=sorted(SCOPE_PATHS),
        default=None,
        help="Sections the fallback generator may touch",
    )
    p_amend.add_argument("--mode", choices=["auto", "regen", "patch"], default="auto")
    p_amend.add_argument("--render", default=None, help="Write a before/after palette PNG here")

    p_parse = sub.add_parser("parse", help="Show the operations an instruction parses into")
    p_parse.add_argument("instruction")

    p_init = sub.add_parser("init", help="Write the baseline theme")
    p_init.add_argument("theme_id")
    p_init.add_argument("--force", action="store_true", help="Overwrite an existing theme")

    p_gen = sub.add_parser("generate", help="Generate a full theme from a description (Gemini)")
    p_gen.add_argument("theme_id")
    p_gen.add_argument("description")

    return parser.parse_args(argv)


# ── Output helpers ────────────────────────────────────────────────────────────

def _diff_table(diff: List[dict], limit: int = 40) -> Table:
    table = Table(show_header=True, header_style="bold", show_lines=False)
    table.add_column("op", style="cyan", no_wrap=True)
    table.add_column("path")
    table.add_column("value", style="green")
    for change in diff[:limit]:
        value = change.get("value")
        shown = "" if change["op"] == "remove" else (value if isinstance(value, str) else json.dumps(value))
        table.add_row(change["op"], change["path"], shown[:80])
    if len(diff) > limit:
        table.add_row("…", f"{len(diff) - limit} more", "")
    return table


def _print_result(result: AmendmentResult, elapsed: float) -> None:
    if result.operations:
        console.print(f"  [dim]operations: {', '.join(op['kind'] for op in result.operations)}[/dim]")
    if result.allowed_paths:
        console.print(f"  [dim]allowed paths: {', '.join(result.allowed_paths)}[/dim]")
    if result.diff:
        console.print(_diff_table(result.diff))
    else:
        console.print("  [yellow]No changes[/yellow]")

    title = "[bold yellow]Preview[/bold yellow]" if result.preview else "[bold green]Saved[/bold green]"
    console.print(
        Panel(
            f"{len(result.diff)} change(s) via [bold]{result.source}[/bold] in {elapsed:.1f}s",
            title=title,
            border_style="yellow" if result.preview else "green",
        )
    )


# ── Commands ──────────────────────────────────────────────────────────────────

def cmd_parse(args: argparse.Namespace, settings: AmenderSettings) -> int:
    ops = parse_instructions(args.instruction)
    if not ops:
        console.print("[yellow]No deterministic match, this instruction would use the fallback generator.[/yellow]")
        return 0
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="dim", width=3)
    table.add_column("kind", style="cyan")
    table.add_column("fields")
    for i, op in enumerate(dump_operations(ops), 1):
        kind = op.pop("kind")
        table.add_row(str(i), kind, json.dumps(op))
    console.print(table)
    return 0


def cmd_init(args: argparse.Namespace, settings: AmenderSettings, store: JsonThemeStore) -> int:
    if args.theme_id in store.list_ids() and not args.force:
        console.print(f"[bold red]Error:[/bold red] theme {args.theme_id} exists (use --force)")
        return 1
    store.save(args.theme_id, default_theme())
    console.print(f"  [green]✓[/green] Baseline theme written → {store.directory / (args.theme_id + '.json')}")
    return 0


def cmd_generate(args: argparse.Namespace, settings: AmenderSettings, store: JsonThemeStore) -> int:
    generator = GeminiThemeGenerator(api_key=settings.api_key, model=settings.model)
    t0 = time.time()
    tokens = generator.generate_theme(args.description)
    store.save(args.theme_id, tokens)
    audit.info(f"theme.generate id={args.theme_id}", extra={"event": "theme.generate", "document_id": args.theme_id})
    console.print(f"  [green]✓ Generated {args.theme_id} in {time.time() - t0:.1f}s[/green]")
    return 0


def cmd_amend(args: argparse.Namespace, settings: AmenderSettings, store: JsonThemeStore) -> int:
    generator = None
    if settings.api_key:
        generator = GeminiThemeGenerator(api_key=settings.api_key, model=settings.model)
    else:
        console.print("  [dim]GEMINI_API_KEY not set, fallback generator disabled[/dim]")

    amender = ThemeAmender(
        store,
        generator=generator,
        cache=AmendmentCache(ttl_seconds=settings.cache_ttl),
        timeout=settings.timeout,
    )
    before = store.get(args.theme_id)

    t0 = time.time()
    result = amender.amend({
        "document_id": args.theme_id,
        "instruction": args.instruction,
        "scope": args.scope,
        "mode": args.mode,
        "dry_run": args.dry_run,
    })
    _print_result(result, time.time() - t0)

    if args.render:
        path = save_palette_diff(before.get("colors", {}), result.tokens.get("colors", {}), args.render)
        console.print(f"  [dim]Palette preview: {path}[/dim]")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    settings = AmenderSettings.from_env()
    store = JsonThemeStore(args.store or settings.store_dir)

    try:
        if args.command == "parse":
            return cmd_parse(args, settings)
        if args.command == "init":
            return cmd_init(args, settings, store)
        if args.command == "generate":
            return cmd_generate(args, settings, store)
        return cmd_amend(args, settings, store)
    except AmendmentRejected as e:
        console.print(f"[bold red]Rejected[/bold red] at [bold]{e.stage}[/bold]: {e.reason}")
        return 2
    except ThemeNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    except (GeneratorError, TokenSchemaError, ValidationError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
