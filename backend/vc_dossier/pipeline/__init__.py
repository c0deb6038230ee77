from .pipeline import VCScraperPipeline
from .export import export_reports_csv, collect_reports, flatten_report, read_reports_csv

__all__ = [
    "VCScraperPipeline",
    "export_reports_csv",
    "collect_reports",
    "flatten_report",
    "read_reports_csv",
]
