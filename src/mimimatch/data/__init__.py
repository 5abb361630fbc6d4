"""Bundled name datasets."""
