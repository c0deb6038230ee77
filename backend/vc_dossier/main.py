"""
Command line entry point.

    vc-dossier run [--input inputs.json] [--firm NAME] [--limit N] [--offset N]
    vc-dossier resume "Firm Name"
    vc-dossier export [--output reports.csv]
    vc-dossier sebi [--max-pages N] [--output inputs.json]
"""

import os
import sys
import json
import asyncio
import argparse
from datetime import datetime
from typing import List, Optional

from .schemas import FirmRecord
from .utils.config import settings
from .utils.logger import app_logger as logger, configure_loggers


def load_records(path: str) -> List[FirmRecord]:
    """Read SEBI-shaped firm records from a JSON array"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of firm records")

    records = []
    for item in data:
        try:
            records.append(FirmRecord.model_validate(item))
        except ValueError as e:
            logger.warning(f"Skipping invalid firm record: {str(e)}")
    return records


def find_record(records: List[FirmRecord], name: str) -> Optional[FirmRecord]:
    wanted = name.strip().lower()
    for record in records:
        if record.name.strip().lower() == wanted:
            return record
    return None


def select_records(records: List[FirmRecord], firm: Optional[str], offset: int, limit: Optional[int]) -> List[FirmRecord]:
    if firm:
        record = find_record(records, firm)
        return [record] if record else []
    selected = records[offset:]
    if limit is not None:
        selected = selected[:limit]
    return selected


async def run_command(args) -> int:
    from .pipeline import VCScraperPipeline

    records = select_records(load_records(args.input), args.firm, args.offset, args.limit)
    if not records:
        logger.error("No firms selected")
        return 1

    logger.info(f"Processing {len(records)} firms from {args.input}")
    pipeline = VCScraperPipeline()
    results = await pipeline.process_batch(records)
    return 0 if any(r.success for r in results) else 1


async def resume_command(args) -> int:
    from .pipeline import VCScraperPipeline

    record = find_record(load_records(args.input), args.firm)
    if record is None:
        logger.error(f"Firm not found in {args.input}: {args.firm}")
        return 1

    pipeline = VCScraperPipeline()
    try:
        result = await pipeline.resume_firm(record)
    finally:
        await pipeline.close()
    return 0 if result.success else 1


def export_command(args) -> int:
    from .pipeline import collect_reports, export_reports_csv
    from .utils.storage import StorageService

    reports = collect_reports(StorageService())
    if not reports:
        logger.error("No final reports to export")
        return 1

    output = args.output or os.path.join(
        settings.EXPORTS_DIR, f"vc_reports_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
    )
    export_reports_csv(reports, output)
    return 0


async def sebi_command(args) -> int:
    from .services.sebi import SebiRegistryScraper

    records = await SebiRegistryScraper().scrape(max_pages=args.max_pages)
    if not records:
        logger.error("No SEBI records scraped")
        return 1
    SebiRegistryScraper.save_records(records, args.output)
    return 0


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(prog="vc-dossier", description="Research dossiers for SEBI-registered VC firms")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run the full pipeline")
    run.add_argument("--input", default=settings.INPUT_FILE, help="JSON array of firm records")
    run.add_argument("--firm", help="Process only the firm with this name")
    run.add_argument("--limit", type=int, help="Maximum number of firms")
    run.add_argument("--offset", type=int, default=0, help="Index of the first firm")

    resume = subparsers.add_parser("resume", help="Resume a firm from LinkedIn scraping")
    resume.add_argument("firm", help="Firm name as it appears in the input file")
    resume.add_argument("--input", default=settings.INPUT_FILE, help="JSON array of firm records")

    export = subparsers.add_parser("export", help="Export final reports as CSV")
    export.add_argument("--output", help="CSV path, defaults to a timestamped file in the exports dir")

    sebi = subparsers.add_parser("sebi", help="Scrape the SEBI VC registry")
    sebi.add_argument("--max-pages", type=int, default=-1, help="Pages to scrape, -1 for all")
    sebi.add_argument("--output", default=settings.INPUT_FILE, help="Where to write the records")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_loggers()

    try:
        if args.command == "run":
            return asyncio.run(run_command(args))
        if args.command == "resume":
            return asyncio.run(resume_command(args))
        if args.command == "export":
            return export_command(args)
        return asyncio.run(sebi_command(args))
    except FileNotFoundError as e:
        logger.error(f"File not found: {e.filename}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
