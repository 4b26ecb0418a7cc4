from src.services.advisor import MaintenanceAdvisor
from src.services.app_settings import SettingsService
from src.services.maintenance_records import MaintenanceRecordService
from src.services.sop_library import SOPLibrary
from src.services.stock_ledger import StockLedger

__all__ = [
    "MaintenanceAdvisor",
    "MaintenanceRecordService",
    "SOPLibrary",
    "SettingsService",
    "StockLedger",
]
