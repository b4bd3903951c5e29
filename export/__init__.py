"""Export-Modul: Excel-Tagesplan (openpyxl)."""

from export.excel_export import DayPlanExporter

__all__ = ["DayPlanExporter"]
