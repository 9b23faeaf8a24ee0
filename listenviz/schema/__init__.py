"""Bundled JSON schema for report files."""
