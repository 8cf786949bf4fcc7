"""
Forms for usage data upload.
"""

from django import forms
from django.conf import settings
from django.utils import translation

from usage.csv_service import parse_usage_csv
from usage.validation import validate_usage_data

FALLBACK_ENCODING = "cp1255"


class UsageCSVUploadForm(forms.Form):
    """Form for uploading a meter CSV export."""

    csv_file = forms.FileField(
        label="CSV File",
        help_text="Upload the .csv file exported from your meter portal",
        widget=forms.FileInput(attrs={"accept": ".csv"}),
    )

    usage_data = None

    def clean_csv_file(self):
        """Validate extension and size, then parse and validate the content."""
        csv_file = self.cleaned_data["csv_file"]

        if not csv_file.name.lower().endswith(".csv"):
            raise forms.ValidationError(f"File must have .csv extension. Received: {csv_file.name}")

        max_size = settings.USAGE_UPLOAD_MAX_BYTES
        if csv_file.size > max_size:
            size_mb = csv_file.size / (1024 * 1024)
            max_mb = max_size / (1024 * 1024)
            raise forms.ValidationError(
                f"File size ({size_mb:.2f}MB) exceeds maximum allowed size ({max_mb:.0f}MB)"
            )

        raw = csv_file.read()
        try:
            content = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            content = raw.decode(FALLBACK_ENCODING, errors="replace")

        result = parse_usage_csv(content)
        if result.success:
            result = validate_usage_data(result.data)
        if not result.success:
            raise forms.ValidationError(
                result.error.message_for(translation.get_language()),
                code=result.error.kind.value,
            )

        self.usage_data = result.data
        return csv_file
