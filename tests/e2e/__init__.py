"""
Browser test package for the demo sites.

This package contains Playwright-based scenarios and demonstrates:
- Page Object Model (POM) pattern
- Reusing a cached authenticated session across tests
- Given/When/Then scenarios written as plain pytest tests
"""
