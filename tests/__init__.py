"""
Test Suite for the Portfolio Analytics Engine

Includes:
- Command-line tests against an in-memory database

Unit and integration tests live beside each package in its tests/ directory.
"""
