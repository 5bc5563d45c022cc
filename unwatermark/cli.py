"""Command-line interface for unwatermark.

Processes single files or directories of images and PDFs, or runs the
HTTP service with the ``serve`` subcommand.
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from .config import ServiceConfig
from .document import DocumentWatermarkRemover, remove_watermark_from_pdf_bytes
from .remover import RemovalResult, remove_watermark_from_image_bytes
from .storage import OUTPUT_SUFFIX
from .utils import file_extension, get_input_files, is_pdf, setup_logger

logger = setup_logger(__name__)


def process_file(
    input_path: Path,
    output_dir: Path,
    threshold: int,
    tolerance: int,
    document_remover: DocumentWatermarkRemover,
) -> RemovalResult:
    """Remove watermarks from one file and write ``<stem>_nowatermark<suffix>``."""
    data = input_path.read_bytes()
    if is_pdf(input_path):
        result = remove_watermark_from_pdf_bytes(data, threshold, tolerance, remover=document_remover)
    else:
        result = remove_watermark_from_image_bytes(
            data, threshold, tolerance, fmt=file_extension(input_path.name)
        )

    output_path = output_dir / f"{input_path.stem}{OUTPUT_SUFFIX}{input_path.suffix}"
    output_path.write_bytes(result.data)
    if result.fallback:
        logger.warning(f"Copied original to {output_path.name}: {result.error}")
    else:
        logger.info(f"Saved result to: {output_path.name}")
    return result


def build_parser(config: ServiceConfig) -> argparse.ArgumentParser:
    """Build the argument parser, taking defaults from ``config``."""
    parser = argparse.ArgumentParser(
        prog="unwatermark",
        description="Remove light gray watermarks from images and PDFs."
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "-l", "--logfile",
        help="Path to log file for detailed logging"
    )

    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="Process files (default)")
    _add_run_arguments(run, config)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    serve.add_argument("--port", type=int, default=8080, help="Port to listen on (default: 8080)")
    serve.add_argument("--debug", action="store_true", help="Run Flask in debug mode")

    return parser


def _add_run_arguments(parser: argparse.ArgumentParser, config: ServiceConfig) -> None:
    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Path to input image/PDF or directory of them"
    )
    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Path to output directory"
    )
    parser.add_argument(
        "--threshold",
        type=int,
        default=config.default_threshold,
        help=f"Brightness above which a gray pixel is treated as watermark (default: {config.default_threshold})"
    )
    parser.add_argument(
        "--tolerance",
        type=int,
        default=config.default_tolerance,
        help=f"Maximum channel difference for a pixel to count as gray (default: {config.default_tolerance})"
    )
    parser.add_argument(
        "--dpi",
        type=int,
        default=config.dpi,
        help=f"Resolution used to render PDF pages (default: {config.dpi})"
    )


def parse_args(argv: Optional[List[str]] = None, config: Optional[ServiceConfig] = None) -> argparse.Namespace:
    """Parse command line arguments.

    ``run`` is assumed when no subcommand is given.
    """
    config = config or ServiceConfig.from_env()
    parser = build_parser(config)
    argv = list(sys.argv[1:] if argv is None else argv)
    index = _first_run_arg(argv)
    if index >= len(argv) or argv[index] not in ("run", "serve", "-h", "--help"):
        argv.insert(index, "run")
    return parser.parse_args(argv)


def _first_run_arg(argv: List[str]) -> int:
    """Index where the implicit ``run`` subcommand goes, after global options."""
    index = 0
    while index < len(argv):
        if argv[index] in ("-v", "--verbose"):
            index += 1
        elif argv[index] in ("-l", "--logfile"):
            index += 2
        elif argv[index].startswith("--logfile="):
            index += 1
        else:
            break
    return index


def _configure_logging(args: argparse.Namespace) -> None:
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        for name in list(logging.root.manager.loggerDict):
            if name.startswith("unwatermark"):
                logging.getLogger(name).setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    if args.logfile:
        log_path = Path(args.logfile)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode='w')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logging.getLogger().addHandler(file_handler)
        logger.info(f"Logging to file: {log_path}")


def run(args: argparse.Namespace) -> int:
    """Process every supported file under ``args.input``.

    Returns:
        Process exit code
    """
    for name in ("threshold", "tolerance"):
        value = getattr(args, name)
        if not 0 <= value <= 255:
            logger.error(f"--{name} must be between 0 and 255, got {value}")
            return 1

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input path '{args.input}' does not exist")
        return 1

    files = get_input_files(input_path)
    if not files:
        logger.error(f"No image or PDF files found in '{args.input}'")
        return 1

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"Found {len(files)} file(s) to process")
    logger.info(f"Using threshold {args.threshold}, tolerance {args.tolerance}")

    document_remover = DocumentWatermarkRemover(dpi=args.dpi, show_progress=True)
    start_time = time.time()
    failures = 0
    fallbacks = 0

    for i, path in enumerate(files, 1):
        logger.info(f"Processing file {i}/{len(files)}: {path.name}")
        try:
            result = process_file(path, output_dir, args.threshold, args.tolerance, document_remover)
            if result.fallback:
                fallbacks += 1
        except Exception as e:
            logger.error(f"Error processing {path.name}: {e}")
            failures += 1
            continue

    total_time = time.time() - start_time
    logger.info("Processing complete:")
    logger.info(f"Total elapsed time: {total_time:.1f} seconds")
    logger.info(f"Files processed: {len(files) - failures}/{len(files)} ({fallbacks} unchanged after errors)")
    return 1 if failures == len(files) else 0


def serve(args: argparse.Namespace, config: ServiceConfig) -> int:
    from .server import create_app

    app = create_app(config)
    logger.info(f"Serving on http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the watermark removal tool."""
    config = ServiceConfig.from_env()
    args = parse_args(argv, config)
    _configure_logging(args)

    if args.command == "serve":
        sys.exit(serve(args, config))
    sys.exit(run(args))


if __name__ == "__main__":
    main()
