# tests/__init__.py
"""
Test Suite for buildtask

Organization:
- Core logic (staleness, naming, linkage, cultures, use case) runs with
  mocked toolchain ports from conftest.py.
- Adapter tests patch subprocess; no real compiler is required.
"""
