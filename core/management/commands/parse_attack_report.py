"""Parse an attack report from a file or stdin and print it as JSON."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from core.parsers.attack_report import (
    compute_attack_report_checksum,
    parse_attack_report,
    validate_attack_report,
)


class Command(BaseCommand):
    """Parse a pasted attack report into its structured JSON form."""

    help = "Parse an attack report (file path or '-' for stdin) and print the structured report as JSON."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument(
            "source",
            help="Path to a text file containing the report, or '-' to read stdin.",
        )
        parser.add_argument(
            "--indent",
            type=int,
            default=2,
            help="JSON indentation (0 for compact output).",
        )
        parser.add_argument(
            "--min-unit-columns",
            type=int,
            default=None,
            help="Override ATTACK_REPORT_MIN_UNIT_COLUMNS for unit table header detection.",
        )
        parser.add_argument(
            "--skip-validation",
            action="store_true",
            help="Parse even when the Attacker/Defender/Statistics markers are missing.",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        source: str = options["source"]
        indent: int = options["indent"]
        min_unit_columns: int | None = options["min_unit_columns"]
        skip_validation: bool = options["skip_validation"]

        raw_text = self._read_source(source)
        if not skip_validation and not validate_attack_report(raw_text):
            raise CommandError(
                "Invalid attack report format; expected Attacker, Defender, and Statistics sections."
            )

        if min_unit_columns is None:
            min_unit_columns = settings.ATTACK_REPORT_MIN_UNIT_COLUMNS
        report = parse_attack_report(raw_text, min_unit_columns=min_unit_columns)

        payload = {
            "checksum": compute_attack_report_checksum(raw_text),
            "report": report.as_json(),
        }
        self.stdout.write(json.dumps(payload, indent=indent or None, ensure_ascii=False))
        return None

    def _read_source(self, source: str) -> str:
        if source == "-":
            return sys.stdin.read()
        path = Path(source)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CommandError(f"Report file not found: {path}") from exc
        except UnicodeDecodeError as exc:
            raise CommandError(f"Report file is not valid UTF-8: {path}") from exc
