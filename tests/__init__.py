# gsmcipher Test Suite
"""
Test suite including:
- Unit tests (bit helpers, clocking, output, loading, keystreams)
- Integration tests (burst encryption, audit log)
- Security tests (invalid keys, thread independence)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
