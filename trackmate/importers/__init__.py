"""
Data Import Module

Importers:
- CSVImporter: lap times from CSV files

Usage:
    from trackmate.importers import CSVImporter
"""

from .csv_importer import CSVImporter

__all__ = ['CSVImporter']
