from datetime import date, datetime


def fmt_certificate_date(value: datetime | date | str | None) -> str:
    """Render dates as ``January 5, 2024``.

    ISO strings are parsed and reformatted; any other string is assumed to be
    display-ready already and is returned unchanged. ``None`` means today.
    """
    if value is None:
        value = date.today()
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return fmt_certificate_date(None)
        try:
            value = date.fromisoformat(text[:10])
        except ValueError:
            return text
    if isinstance(value, datetime):
        value = value.date()
    return f"{value:%B} {value.day}, {value.year}"
