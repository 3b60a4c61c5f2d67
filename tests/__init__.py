"""
Test suite for stash-zip.

Test Categories:
- Unit tests: listing, filtering, copy/remove, archive creation, settings
- Pipeline tests: full runs over temporary directories with a scripted selector
- CLI tests: argument parsing and exit codes of the entry point
"""
