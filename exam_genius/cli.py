"""
Command-line interface for the exam sheet generator.
"""

import argparse
import base64
import json
import logging
import mimetypes
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config_store import ConfigStore
from .errors import ExamGeniusError
from .layout import QUESTION_TYPE_LABELS, TYPE_ORDER, paginate
from .schema import DIFFICULTIES, ExamPaper, FileData, GenerationConfig, GenerationResult, QuestionType

console = Console()

_TYPE_ALIASES = {
    "mc": QuestionType.MULTIPLE_CHOICE,
    "tf": QuestionType.TRUE_FALSE,
    "fib": QuestionType.FILL_IN_THE_BLANK,
    "match": QuestionType.MATCHING,
    "short": QuestionType.SHORT_ANSWER,
    "long": QuestionType.LONG_ANSWER,
}


def parse_count(value: str) -> tuple[QuestionType, int]:
    """Parse 'TYPE=N' where TYPE is an enum value or a short alias (mc, tf, fib, match, short, long)."""
    if "=" not in value:
        raise argparse.ArgumentTypeError(f"Expected TYPE=N, got '{value}'")
    name, _, count = value.partition("=")
    name = name.strip()
    qtype = _TYPE_ALIASES.get(name.lower())
    if qtype is None:
        try:
            qtype = QuestionType(name.upper())
        except ValueError:
            raise argparse.ArgumentTypeError(f"Unknown question type '{name}'") from None
    try:
        n = int(count)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Count must be an integer, got '{count}'") from None
    return qtype, max(0, n)


def build_config(args: argparse.Namespace, base: GenerationConfig | None = None) -> GenerationConfig:
    """Combine CLI options with a base config (defaults or the saved one)."""
    config = base or GenerationConfig()
    update: dict = {}

    if args.text:
        update["source_type"] = "TEXT"
        update["content"] = Path(args.text).read_text(encoding="utf-8")
    elif args.url:
        update["source_type"] = "URL"
        update["content"] = args.url
    elif args.file:
        path = Path(args.file)
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        update["source_type"] = "FILE"
        update["file_data"] = FileData(mime_type=mime_type, data=base64.b64encode(path.read_bytes()).decode("ascii"))
        if args.notes:
            update["content"] = args.notes

    if args.difficulty:
        update["difficulty"] = args.difficulty
    if args.pages:
        update["page_count"] = args.pages
    if args.count:
        counts = dict(config.question_counts)
        counts.update(dict(args.count))
        update["question_counts"] = counts

    return GenerationConfig.model_validate({**config.model_dump(), **update})


def format_generation_result(result: GenerationResult) -> None:
    """Display a generation result as a table plus the exam header."""
    table = Table(title=f"Generation Results - {result.model_name}")

    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="magenta")

    table.add_row("Model", result.model_name)
    table.add_row("Questions", str(len(result.exam.questions)))
    table.add_row("Sheets", str(len(paginate(result.exam))))
    table.add_row("Input Tokens", f"{result.total_tokens_input:,}")
    table.add_row("Output Tokens", f"{result.total_tokens_output:,}")
    table.add_row("Cost (USD)", f"${result.total_cost_usd:.4f}")
    table.add_row("Time", f"{result.generation_time_seconds:.2f}s")

    console.print(table)

    header = result.exam.header
    info_text = f"""
Title: {header.title}
School: {header.school_name or 'N/A'}
Grade: {header.grade or 'N/A'}
Duration: {header.duration_minutes} min
    """.strip()
    console.print(Panel(info_text, title="Exam Header", border_style="green"))

    for warning in result.warnings:
        console.print(f"  [yellow]WARNING[/yellow] {warning}")


def format_layout(exam: ExamPaper) -> None:
    table = Table(title="Sheets")
    table.add_column("Page", justify="right", style="cyan")
    table.add_column("Sections", style="green")
    table.add_column("Questions", justify="right", style="magenta")

    for sheet in paginate(exam):
        sections = ", ".join(f"{s.type.value} ({len(s.items)})" for s in sheet.sections) or "-"
        table.add_row(str(sheet.number), sections, str(sheet.question_count))

    console.print(table)


def write_outputs(exam: ExamPaper, args: argparse.Namespace) -> None:
    if args.output:
        Path(args.output).write_text(exam.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        console.print(f"[green]V[/green] Exam saved to {args.output}")
    if args.html:
        from .renderer import render_print_page

        Path(args.html).write_text(render_print_page(exam), encoding="utf-8")
        console.print(f"[green]V[/green] Print view saved to {args.html}")
    if args.pdf:
        from .exporter import PDFExporter

        PDFExporter(font_dir=args.font_dir).export_to_file(exam, args.pdf)
        console.print(f"[green]V[/green] PDF saved to {args.pdf}")


def _add_source_options(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--text", type=str, help="Path to a UTF-8 text file with the source content")
    source.add_argument("--url", type=str, help="URL of the source page")
    source.add_argument("--file", type=str, help="Image or PDF file used as the source")
    parser.add_argument("--notes", type=str, default=None, help="Extra notes sent with --file")
    parser.add_argument("-d", "--difficulty", choices=DIFFICULTIES, default=None)
    parser.add_argument(
        "-c", "--count",
        type=parse_count,
        action="append",
        help="Per-type question count, e.g. mc=4 or TRUE_FALSE=3 (repeatable)",
    )
    parser.add_argument("--pages", type=int, default=None, help="Number of sheets")
    parser.add_argument("--saved", action="store_true", help="Start from the saved config")


def _add_output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-o", "--output", type=str, default=None, help="Output exam JSON path")
    parser.add_argument("--pdf", type=str, default=None, help="Output PDF path")
    parser.add_argument("--html", type=str, default=None, help="Output print-view HTML path")
    parser.add_argument("--font-dir", type=str, default=None, help="Directory with a Persian .ttf font for PDF")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exam-genius",
        description="Generate printable exam sheets from text, URLs or files with Gemini",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate an exam")
    _add_source_options(gen)
    _add_output_options(gen)
    gen.add_argument("-m", "--model", type=str, default=None, help="Gemini model (default: GEMINI_MODEL)")

    render = sub.add_parser("render", help="Render an exam JSON to HTML/PDF")
    render.add_argument("exam_json", type=str)
    _add_output_options(render)

    cfg = sub.add_parser("config", help="Save or show the saved generation config")
    cfg.add_argument("action", choices=["save", "show", "clear"])
    _add_source_options(cfg)

    sub.add_parser("types", help="List question types")

    serve = sub.add_parser("serve", help="Run the web server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    return parser


def _cmd_generate(args: argparse.Namespace) -> None:
    from .generator import ExamGenerator
    from .models.gemini_client import GeminiExamClient

    base = ConfigStore().load() if args.saved else None
    config = build_config(args, base)

    console.print(f"[blue]Generating {config.total_questions} questions ({config.difficulty})...[/blue]")
    result = ExamGenerator(GeminiExamClient(model_name=args.model)).generate(config)

    format_generation_result(result)
    format_layout(result.exam)
    write_outputs(result.exam, args)


def _cmd_render(args: argparse.Namespace) -> None:
    exam_path = Path(args.exam_json)
    if not exam_path.exists():
        console.print(f"[red]Error:[/red] Exam file not found: {exam_path}")
        sys.exit(1)
    exam = ExamPaper.model_validate_json(exam_path.read_text(encoding="utf-8"))
    format_layout(exam)
    write_outputs(exam, args)


def _cmd_config(args: argparse.Namespace) -> None:
    store = ConfigStore()
    if args.action == "clear":
        store.clear()
        console.print("[green]V[/green] Saved config cleared")
        return
    if args.action == "save":
        base = store.load() if args.saved else None
        store.save(build_config(args, base))
        console.print(f"[green]V[/green] Config saved to {store.path}")
        return

    config = store.load()
    if config is None:
        console.print("[yellow]No saved config[/yellow]")
        return
    shown = config.model_dump(mode="json", by_alias=True, exclude={"file_data"})
    console.print_json(json.dumps(shown, ensure_ascii=False))


def _cmd_types() -> None:
    table = Table(title="Question Types (display order)")
    table.add_column("Type", style="cyan")
    table.add_column("Label", style="green")
    for qtype in TYPE_ORDER:
        table.add_row(qtype.value, QUESTION_TYPE_LABELS[qtype])
    console.print(table)


def main(argv: list[str] | None = None):
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "generate":
            _cmd_generate(args)
        elif args.command == "render":
            _cmd_render(args)
        elif args.command == "config":
            _cmd_config(args)
        elif args.command == "types":
            _cmd_types()
        elif args.command == "serve":
            import uvicorn

            uvicorn.run("exam_genius.server:app", host=args.host, port=args.port, reload=args.reload)
    except ExamGeniusError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
