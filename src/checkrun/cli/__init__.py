"""Command line handling for checkrun suites."""
