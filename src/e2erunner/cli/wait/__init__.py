"""Readiness commands: wait for URLs and files."""
