"""
Export Module

Flattens final reports into one CSV row per firm.
"""

from pathlib import Path
from typing import Dict, Any, List, Union

import pandas as pd

from ..schemas import FirmReport
from ..utils.logger import export_logger as logger
from ..utils.storage import StorageService

CSV_COLUMNS = list(FirmReport.model_fields.keys())
LIST_SEPARATOR = "; "


def flatten_report(report: Union[FirmReport, Dict[str, Any]]) -> Dict[str, str]:
    """Render every report field as a single CSV cell"""
    if isinstance(report, dict):
        report = FirmReport.model_validate(report)

    row: Dict[str, str] = {}
    for column in CSV_COLUMNS:
        value = getattr(report, column)
        if column == "gps":
            row[column] = LIST_SEPARATOR.join(
                f"{gp.name}: {gp.background}" if gp.background else gp.name for gp in value
            )
        elif isinstance(value, list):
            row[column] = LIST_SEPARATOR.join(str(v) for v in value)
        else:
            row[column] = str(value)
    return row


def export_reports_csv(reports: List[Union[FirmReport, Dict[str, Any]]], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame([flatten_report(report) for report in reports], columns=CSV_COLUMNS)
    df.to_csv(path, index=False, encoding="utf-8")

    logger.info(f"Exported {len(df)} reports to {path}")
    return path


def read_reports_csv(path: Union[str, Path]) -> List[Dict[str, str]]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    return df.to_dict(orient="records")


def collect_reports(storage: StorageService) -> List[FirmReport]:
    """Load every final_report.json found under the firms directory"""
    reports = []
    for slug in storage.list_firm_slugs():
        data = storage.load_json(slug, "final_report.json")
        if not data:
            logger.debug(f"No final report for {slug}")
            continue
        try:
            reports.append(FirmReport.model_validate(data))
        except ValueError as e:
            logger.warning(f"Skipping invalid report for {slug}: {str(e)}")
    logger.info(f"Collected {len(reports)} final reports")
    return reports
