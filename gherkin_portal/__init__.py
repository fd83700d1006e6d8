"""
Gherkin Portal - Cucumber lifecycle reporting for ReportPortal

Translates the lifecycle events of a Gherkin test run (features, scenarios,
steps and hooks) into launches, test items and log entries on a remote
ReportPortal-style reporting service.
"""

__version__ = "0.1.0"
__author__ = "Gherkin Portal Team"
