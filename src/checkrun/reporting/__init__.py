"""Reporting of suite runs: terminal log and JSON report."""
