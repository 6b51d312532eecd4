"""Command-line interface for classifying and parsing OCR text dumps.

Provides subcommands for classifying a single text file, parsing one
file into structured fields, and processing a folder of text files into
a CSV of canonical wine records.
"""

import argparse
import csv
import json
import sys
import time
from pathlib import Path

from winedoc.models import DocumentType
from winedoc.pipeline import DocumentPipeline
from winedoc.utils.config import AppConfig, load_config
from winedoc.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.txt",)
_TYPE_CHOICES = [t.value for t in DocumentType if t is not DocumentType.UNKNOWN]
_META_COLUMNS = [
    "filename",
    "status",
    "document_type",
    "confidence",
    "processing_time_s",
    "warnings",
    "error",
]


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all OCR text files in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of text file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def process_folder(
    input_dir: Path,
    output_csv: Path,
    document_type: str | None = None,
    verbose: bool = False,
    config: AppConfig | None = None,
) -> dict[str, int]:
    """Process every text file in a folder and export wine records to CSV.

    Each canonical wine record becomes one CSV row. A document that yields
    no records still gets a row so failures stay visible.

    Args:
        input_dir: Directory containing OCR text files.
        output_csv: Path for the output CSV file.
        document_type: Type to force for every file. Classified per file
            when ``None``.
        verbose: Whether to print per-file progress.
        config: Application configuration. Loaded from disk when ``None``.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    pipeline = DocumentPipeline(config or load_config())

    files = _find_documents(input_dir)
    if not files:
        logger.warning("No documents found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d documents to process", len(files))

    rows: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            result = pipeline.process(_read_text(file_path), document_type)
        except (OSError, ValueError) as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            rows.append(
                {"filename": file_path.name, "status": "failed", "error": str(exc)}
            )
            failed += 1
            continue

        meta: dict[str, object] = {
            "filename": file_path.name,
            "status": "success" if result.wines else "empty",
            "document_type": str(result.document_type),
            "confidence": result.classification.confidence,
            "processing_time_s": round(time.time() - start_time, 3),
            "warnings": "; ".join(result.warnings) or None,
            "error": None,
        }
        if result.wines:
            rows.extend({**meta, **wine.to_dict()} for wine in result.wines)
        else:
            rows.append(meta)
        successful += 1

    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    """Write result rows to a CSV file.

    Args:
        results: List of row dictionaries.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    all_keys: set[str] = set()
    for r in results:
        all_keys.update(r.keys())

    field_columns = sorted(all_keys - set(_META_COLUMNS))
    columns = [c for c in _META_COLUMNS if c in all_keys] + field_columns

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch processing summary to stdout."""
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def parse_single(
    file_path: Path,
    document_type: str | None = None,
    config: AppConfig | None = None,
) -> dict[str, object]:
    """Parse a single OCR text file.

    Args:
        file_path: Path to the text file.
        document_type: Type to force instead of classifying.
        config: Application configuration. Loaded from disk when ``None``.

    Returns:
        Dictionary with the filename and the full processing result.
    """
    pipeline = DocumentPipeline(config or load_config())
    result = pipeline.process(_read_text(file_path), document_type)
    return {"filename": file_path.name, **result.to_dict()}


def _emit(payload: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str, encoding="utf-8")
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Wine label and receipt OCR text parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--config", type=Path, help="YAML configuration file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    classify_parser = subparsers.add_parser(
        "classify", help="Classify a single OCR text file"
    )
    classify_parser.add_argument("file", type=Path, help="OCR text file")

    single_parser = subparsers.add_parser("parse", help="Parse a single OCR text file")
    single_parser.add_argument("file", type=Path, help="OCR text file")
    single_parser.add_argument(
        "-t",
        "--type",
        choices=_TYPE_CHOICES,
        default=None,
        dest="doc_type",
        help="Document type (default: classify automatically)",
    )
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser(
        "batch", help="Process a folder of OCR text files"
    )
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with .txt files"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("wines.csv"),
        help="Output CSV file (default: wines.csv)",
    )
    batch_parser.add_argument(
        "-t",
        "--type",
        choices=_TYPE_CHOICES,
        default=None,
        dest="doc_type",
        help="Document type (default: classify each file)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.logging)

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(
            args.input_dir, args.output, args.doc_type, args.verbose, config
        )
    elif args.command in ("classify", "parse"):
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        if args.command == "classify":
            pipeline = DocumentPipeline(config)
            result = pipeline.classifier.classify(_read_text(args.file))
            _emit({"filename": args.file.name, **result.to_dict()}, None)
        else:
            _emit(parse_single(args.file, args.doc_type, config), args.output)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
