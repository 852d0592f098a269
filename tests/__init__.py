"""
fsmeta test suite.

Tests are organized by layer:
    tests/unit/         Core modules (values, paths, root, store, config)
    tests/integration/  The fsm command line through click's CliRunner

Run all tests:
    pytest

Run unit tests only:
    pytest tests/unit/
"""
