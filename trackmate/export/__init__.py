"""
Data Export Module

Exporters:
- CSVExporter: a driver's laps as CSV

Usage:
    from trackmate.export import CSVExporter

    CSVExporter(repository).export_laps(user_id, 'exports/laps.csv')
"""

from .csv_exporter import CSVExporter

__all__ = ['CSVExporter']
