"""Helpers shared by the unit and E2E suites: retries, session cache, test data."""
