"""
Plain-text report rendering for a harvest run.

The report summarizes how many articles were harvested and kept, how many
kept articles matched each category, and lists every kept article.
"""

import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader

from .errors import OutputError
from .processing.assembler import AiRecord
from .utils import ensure_directory

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / 'templates'
REPORT_TEMPLATE = 'report.txt.j2'


def count_categories(records: Sequence[AiRecord]) -> dict[str, int]:
    """Number of records each category matched in, in first-seen order."""
    counts: Counter[str] = Counter()
    for record in records:
        counts.update(record.keyword_categories.keys())
    return dict(counts)


class ReportBuilder:
    """Renders the run summary with a Jinja2 template."""

    def __init__(self, template_dir: Path | None = None):
        self.template_dir = Path(template_dir or TEMPLATE_DIR)
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render(self, all_records: Sequence[AiRecord], kept_records: Sequence[AiRecord],
               generated_at: datetime | None = None) -> str:
        """Render the report for one run."""
        template = self.jinja_env.get_template(REPORT_TEMPLATE)
        return template.render(
            generated_at=generated_at or datetime.now(),
            total_count=len(all_records),
            kept_count=len(kept_records),
            category_counts=count_categories(kept_records),
            records=kept_records,
        )

    def save_report(self, report: str, output_path: Path) -> Path:
        """Save report to file.

        Raises:
            OutputError: If the file cannot be written
        """
        output_path = Path(output_path)
        try:
            ensure_directory(output_path.parent)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(report)
        except OSError as e:
            raise OutputError(f"Failed to write report to {output_path}: {e}") from e

        logger.info(f"Report saved to {output_path}")
        return output_path


def write_report(all_records: Sequence[AiRecord], kept_records: Sequence[AiRecord],
                 output_path: Path) -> Path:
    """Convenience function: render and save the report."""
    builder = ReportBuilder()
    return builder.save_report(builder.render(all_records, kept_records), output_path)
