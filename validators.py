from typing import Any, Optional


def parse_int_or_default(raw: Any, default: int) -> int:
    """Parse user input as an int, falling back to ``default`` when it is not numeric."""
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


class TextValidator:
    """Basic cleanup for free-text fields typed by the user."""

    @staticmethod
    def clean(text: Optional[str]) -> str:
        if text is None:
            return ""
        return str(text).strip()
