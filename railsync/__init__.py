"""
railsync - keeps Gherkin scenarios and TestRail cases in step and reports
scenario outcomes to a TestRail run.
"""

__version__ = "0.1.0"
