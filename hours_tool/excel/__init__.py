"""Excel report output."""
from hours_tool.excel.generator import generate_excel_report

__all__ = ["generate_excel_report"]
