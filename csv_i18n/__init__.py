"""Convert directories of CSV translation tables into per-language i18n files."""

__version__ = '0.1.0'
