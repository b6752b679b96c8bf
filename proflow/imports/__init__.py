"""Spreadsheet import module."""
