from datetime import date, datetime, timezone
from typing import Optional


def today_iso(now: Optional[datetime] = None) -> str:
    """Data UTC corrente no formato YYYY-MM-DD."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).date().isoformat()


def normalize_date(value, default: Optional[str] = None) -> str:
    """Aceita YYYY-MM-DD ou ISO completo; qualquer outra coisa vira `default` (hoje)."""
    if isinstance(value, str) and value.strip():
        raw = value.strip()
        try:
            return date.fromisoformat(raw[:10]).isoformat()
        except ValueError:
            pass
    return default or today_iso()
