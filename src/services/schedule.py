"""Bakım periyodu hesaplamaları - yalnızca takvim tarihi aritmetiği."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional, Union

from src.models.errors import InvalidDateError, ValidationError
from src.models.maintenance import Equipment, ServiceStatus

DateLike = Union[str, date]


def parse_date(value: DateLike) -> date:
    """YYYY-MM-DD (veya ISO datetime) değerini takvim tarihine çevirir."""
    if isinstance(value, date):
        return value if type(value) is date else value.date()
    if not isinstance(value, str) or not value:
        raise InvalidDateError(f"Geçersiz tarih: {value!r}")
    # Tarihten sonra yalnızca saat kısmı gelebilir
    rest = value[10:]
    if rest and rest[0] not in "T ":
        raise InvalidDateError(f"Geçersiz tarih: {value!r}")
    try:
        return date.fromisoformat(value[:10])
    except ValueError as e:
        raise InvalidDateError(f"Geçersiz tarih: {value!r}") from e


def today_str(today: Optional[DateLike] = None) -> str:
    return parse_date(today).isoformat() if today is not None else date.today().isoformat()


def validate_cycle_days(cycle_days: int) -> int:
    if isinstance(cycle_days, bool) or not isinstance(cycle_days, int) or cycle_days <= 0:
        raise ValidationError(f"Periyot pozitif tam sayı olmalıdır: {cycle_days!r}")
    return cycle_days


def compute_next_date(last_date: DateLike, cycle_days: int) -> str:
    """Son bakım tarihine periyot gününü ekler."""
    validate_cycle_days(cycle_days)
    return (parse_date(last_date) + timedelta(days=cycle_days)).isoformat()


def classify_status(next_date: DateLike, today: Optional[DateLike] = None) -> ServiceStatus:
    nxt = parse_date(next_date)
    ref = parse_date(today) if today is not None else date.today()
    if nxt < ref:
        return ServiceStatus.OVERDUE
    if nxt == ref:
        return ServiceStatus.DUE
    return ServiceStatus.OK


def list_due_tasks(equipment: Iterable[Equipment], today: Optional[DateLike] = None) -> list[Equipment]:
    """Bugün veya daha önce bakımı gelen ekipmanları en eskiden başlayarak döndürür."""
    ref = parse_date(today) if today is not None else date.today()
    due = [e for e in equipment if parse_date(e.next_service_date) <= ref]
    return sorted(due, key=lambda e: e.next_service_date)


def status_summary(equipment: Iterable[Equipment], today: Optional[DateLike] = None) -> dict[str, int]:
    summary = {status.value: 0 for status in ServiceStatus}
    for e in equipment:
        summary[classify_status(e.next_service_date, today).value] += 1
    return summary
