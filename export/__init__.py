"""Export-Modul: iCalendar (ics) und Terminal-Raster (Rich) für den Stundenplan."""

from export.calendar_export import CalendarProjector, ExportResult, IcsExporter, RecurringEvent

__all__ = ["CalendarProjector", "ExportResult", "IcsExporter", "RecurringEvent"]
