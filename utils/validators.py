from datetime import datetime, timedelta
from typing import Any, Optional


def parse_book_id(raw: Any) -> Optional[int]:
    """Turn a path parameter into a book id.

    Anything that is not a whole number yields ``None`` so callers report
    "not found" instead of a validation error.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        value = float(s)
    except ValueError:
        return None
    if not value.is_integer():
        return None
    return int(value)


def due_date_from_now(days: int, now: Optional[datetime] = None) -> str:
    """ISO timestamp ``days`` days after ``now``."""
    start = now or datetime.now()
    return (start + timedelta(days=days)).isoformat()


class TextValidator:
    """Presence checks for required text fields."""

    @staticmethod
    def is_present(value: Optional[str]) -> bool:
        if value is None:
            return False
        return bool(str(value).strip())

    @staticmethod
    def validate_title(title: Optional[str]) -> bool:
        return TextValidator.is_present(title)

    @staticmethod
    def validate_author(author: Optional[str]) -> bool:
        return TextValidator.is_present(author)
