"""Dışa aktarma testleri - CSV ve HTML rapor."""

import csv
import io

from src.models.maintenance import (
    Direction,
    Equipment,
    PhotoAttachment,
    ServiceRecord,
    StockTransaction,
)
from src.services.exports import (
    BOM,
    DUE_TASK_HEADERS,
    due_tasks_csv,
    history_report_html,
    stock_log_csv,
    write_export,
)


def _rows(content):
    assert content.startswith(BOM)
    return list(csv.reader(io.StringIO(content[len(BOM):])))


def _equipment(eq_id, name, next_date):
    return Equipment(
        id=eq_id, name=name, type="Motor", location="Zone A", lubricant="EP2",
        cycle_days=30, last_service_date="2024-01-01", next_service_date=next_date, capacity="40g",
    )


class TestDueTasksCsv:

    def test_due_and_overdue_rows(self):
        equipment = [
            _equipment("1", "Motor, Main", "2024-03-10"),
            _equipment("2", "Fan", "2024-03-01"),
            _equipment("3", "Gearbox", "2024-05-01"),
        ]
        rows = _rows(due_tasks_csv(equipment, "2024-03-10"))
        assert rows[0] == DUE_TASK_HEADERS
        assert rows[1][:2] == ["Overdue", "Fan"]
        assert rows[2][:2] == ["Due", "Motor, Main"]
        assert rows[2][6:] == ["2024-03-10", "", "", ""]
        assert len(rows) == 3

    def test_fields_are_quoted(self):
        content = due_tasks_csv([_equipment("1", "Fan", "2024-03-01")], "2024-03-10")
        assert '"Overdue","Fan","Zone A"' in content


class TestStockLogCsv:

    def test_newest_first(self):
        txs = [
            StockTransaction("t1", "1", "EP2", Direction.OUT, 0.5, "Ali", "2024-03-01T08:00:00"),
            StockTransaction("t2", "1", "EP2", Direction.IN, 20.0, "Ayse", "2024-03-05T08:00:00"),
        ]
        rows = _rows(stock_log_csv(txs))
        assert rows[1] == ["2024-03-05T08:00:00", "EP2", "IN", "20", "Ayse"]
        assert rows[2] == ["2024-03-01T08:00:00", "EP2", "OUT", "0.5", "Ali"]


class TestHistoryReport:

    def test_embeds_photos_and_escapes_text(self):
        record = ServiceRecord(
            id="r1", equipment_id="1", equipment_name="Pump <P-102>", performed_date="2024-03-01",
            performed_by="Ali", notes="Oil & filter",
            photos=[PhotoAttachment(id="p1", data_url="data:image/jpeg;base64,AAAA", comment="before")],
        )
        report = history_report_html([record], "2024-03-10")
        assert "Lubrication History Report - 2024-03-10" in report
        assert "Pump &lt;P-102&gt;" in report
        assert "Oil &amp; filter" in report
        assert '<img src="data:image/jpeg;base64,AAAA" />' in report
        assert "before" in report

    def test_write_export(self, tmp_path):
        path = write_export(tmp_path / "out" / "tasks.csv", due_tasks_csv([], "2024-03-10"))
        assert path.read_text(encoding="utf-8").startswith(BOM)
