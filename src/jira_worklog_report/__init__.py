"""Jira work-log report: fetch, flatten, render."""
