"""Forms for attack report ingestion.

The form is the admission gate in front of the parser: it rejects pastes that
are blank or lack the mandatory section markers, and only then hands the raw
text to `parse_attack_report`.
"""

from __future__ import annotations

from django import forms
from django.conf import settings

from core.parsers.attack_report import AttackReport, parse_attack_report, validate_attack_report


class AttackReportForm(forms.Form):
    """Validate user-submitted raw attack report text."""

    EMPTY_MESSAGE = "Please paste the attack report text."
    INVALID_MESSAGE = (
        "Invalid attack report format. Please ensure the text contains "
        "Attacker, Defender, and Statistics sections."
    )

    raw_text = forms.CharField(
        label="Attack report",
        strip=False,
        required=False,
        widget=forms.Textarea(attrs={"rows": 12, "cols": 80}),
        help_text="Paste exactly one attack report from the game client.",
    )

    def clean_raw_text(self) -> str:
        """Validate that the input looks like an attack report.

        Returns:
            The raw report text as entered by the user.
        """

        raw_text = self.cleaned_data.get("raw_text") or ""
        if not raw_text.strip():
            raise forms.ValidationError(self.EMPTY_MESSAGE, code="empty")
        max_chars = settings.ATTACK_REPORT_MAX_CHARS
        if len(raw_text) > max_chars:
            raise forms.ValidationError(
                f"Attack reports are limited to {max_chars} characters.",
                code="too_long",
            )
        if not validate_attack_report(raw_text):
            raise forms.ValidationError(self.INVALID_MESSAGE, code="invalid_format")
        return raw_text

    def parse(self) -> AttackReport:
        """Parse the validated report text.

        Returns:
            The parsed AttackReport.

        Raises:
            ValueError: If the form has not been validated successfully.
        """

        if not self.is_valid():
            raise ValueError("Cannot parse an invalid attack report form.")
        return parse_attack_report(
            self.cleaned_data["raw_text"],
            min_unit_columns=settings.ATTACK_REPORT_MIN_UNIT_COLUMNS,
        )
