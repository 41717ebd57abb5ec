#!/usr/bin/env python3
"""
Outlook Exporter - OST/PST to EML/VCF/ICS

Main entry point for the application.
"""

import argparse
import os
import sys
import logging
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.conversion_pipeline import ConversionPipeline, ExportConfig, DEFAULT_EXTENSIONS


def get_log_directory() -> Path:
    """Get the per-user log directory for this platform."""
    home = Path.home()
    if sys.platform == 'win32':
        log_dir = Path(os.environ.get('LOCALAPPDATA', home)) / 'OutlookExporter' / 'logs'
    elif sys.platform == 'darwin':
        log_dir = home / 'Library' / 'Logs' / 'OutlookExporter'
    else:
        log_dir = home / '.local' / 'share' / 'OutlookExporter' / 'logs'

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        # Fallback to temp directory if we can't create the preferred location
        import tempfile
        log_dir = Path(tempfile.gettempdir()) / 'OutlookExporter' / 'logs'
        log_dir.mkdir(parents=True, exist_ok=True)

    return log_dir


def setup_logging(verbose: bool = False):
    """Configure application logging."""
    log_file = get_log_directory() / "outlook_exporter.log"

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)

    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[file_handler, console_handler]
    )

    logging.getLogger(__name__).info(f"Log file location: {log_file}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export the OST/PST files in a directory to EML, VCF and ICS files."
    )
    parser.add_argument(
        'input_dir', nargs='?', default=os.getcwd(),
        help="Directory containing mailbox files (default: current directory)"
    )
    parser.add_argument(
        '-o', '--output-dir',
        help="Output directory (default: <input_dir>/outlook_export)"
    )
    parser.add_argument(
        '-e', '--extension', action='append', dest='extensions',
        help=f"Mailbox file extension to look for, repeatable (default: {' '.join(DEFAULT_EXTENSIONS)})"
    )
    parser.add_argument(
        '--list', action='store_true', dest='inspect_only',
        help="Only print each mailbox's folder tree"
    )
    parser.add_argument('-v', '--verbose', action='store_true', help="Debug output on the console")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    config = ExportConfig(
        input_dir=args.input_dir,
        output_dir=args.output_dir,
        extensions=tuple(args.extensions) if args.extensions else DEFAULT_EXTENSIONS,
        inspect_only=args.inspect_only,
    )
    pipeline = ConversionPipeline(config)

    if config.inspect_only:
        listings = pipeline.inspect()
        for mailbox_path, lines in listings:
            print(f"\n{mailbox_path.name}")
            print("\n".join(lines))
        return 0 if listings else 1

    logger.info("Starting Outlook Exporter")
    result = pipeline.run()

    if result.files_found == 0:
        logger.warning(f"No mailbox files found in {config.input_dir}")
        return 1

    for file_result in result.failed:
        logger.warning(f"Failed: {file_result.input_path.name}: {file_result.error}")
    logger.info(f"Output directory: {config.output_base}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
