"""Dışa aktarma dosyaları (yalnızca yazma): görev listesi, stok defteri, geçmiş raporu."""

from __future__ import annotations

import csv
import html
import io
from pathlib import Path
from typing import Iterable, Optional, Union

from src.models.maintenance import Equipment, ServiceRecord, ServiceStatus, StockTransaction
from src.services.schedule import DateLike, classify_status, list_due_tasks, today_str

# Excel'in UTF-8'i tanıması için
BOM = "\ufeff"

DUE_TASK_HEADERS = [
    "Status", "Name", "Location", "Type", "Lubricant", "Capacity",
    "Plan Date", "Actual Date", "Performer", "Notes",
]
STOCK_LOG_HEADERS = ["Date", "Item", "Type", "Amount", "User"]


def _to_csv(headers: list[str], rows: Iterable[list]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return BOM + buffer.getvalue()


def due_tasks_csv(equipment: Iterable[Equipment], today: Optional[DateLike] = None) -> str:
    """Bugün yapılması gereken görevler; gerçekleşme sütunları sahada elle doldurulur."""
    ref = today_str(today)
    rows = []
    for item in list_due_tasks(equipment, ref):
        status = "Overdue" if classify_status(item.next_service_date, ref) == ServiceStatus.OVERDUE else "Due"
        rows.append([
            status, item.name, item.location, item.type, item.lubricant,
            item.capacity, item.next_service_date, "", "", "",
        ])
    return _to_csv(DUE_TASK_HEADERS, rows)


def stock_log_csv(transactions: Iterable[StockTransaction]) -> str:
    ordered = sorted(transactions, key=lambda t: t.timestamp, reverse=True)
    rows = [
        [t.timestamp, t.inventory_name, t.direction.value, f"{t.amount:g}", t.user]
        for t in ordered
    ]
    return _to_csv(STOCK_LOG_HEADERS, rows)


def history_report_html(records: Iterable[ServiceRecord], today: Optional[DateLike] = None) -> str:
    """Fotoğrafları satır içi gömülü statik HTML bakım geçmişi raporu."""
    lines = [
        "<html>",
        "<head>",
        '<meta charset="UTF-8">',
        "<style>",
        "table { border-collapse: collapse; width: 100%; }",
        "th, td { border: 1px solid #ddd; padding: 8px; text-align: left; vertical-align: top; }",
        "th { background-color: #f2f2f2; }",
        ".photo-container { margin-bottom: 10px; border: 1px solid #eee; padding: 5px; }",
        "img { max-width: 150px; height: auto; display: block; margin-bottom: 5px; }",
        ".comment { font-size: 11px; color: #555; }",
        "</style>",
        "</head>",
        "<body>",
        f"<h2>Lubrication History Report - {today_str(today)}</h2>",
        "<table>",
        "<thead><tr><th>Date</th><th>Equipment</th><th>User</th><th>Notes</th><th>Photos</th></tr></thead>",
        "<tbody>",
    ]
    for r in records:
        photos = "".join(
            '<div class="photo-container">'
            f'<img src="{html.escape(p.data_url, quote=True)}" />'
            f'<div class="comment">{html.escape(p.comment)}</div>'
            "</div>"
            for p in r.photos
        )
        lines.append(
            "<tr>"
            f"<td>{html.escape(r.performed_date)}</td>"
            f"<td>{html.escape(r.equipment_name)}</td>"
            f"<td>{html.escape(r.performed_by)}</td>"
            f"<td>{html.escape(r.notes)}</td>"
            f'<td class="photo-cell">{photos}</td>'
            "</tr>"
        )
    lines.extend(["</tbody>", "</table>", "</body>", "</html>"])
    return "\n".join(lines)


def write_export(path: Union[str, Path], content: str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    return path
