"""
Test suite for the OrangeHRM and Sauce Demo UI automation project.

This package contains:
- unit/: Browser-free tests for the retry executor, session cache, config and helpers
- e2e/: Playwright scenarios against the public demo sites
"""
