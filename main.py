"""Entry point for the Jira work-log report.
Usage:
    python main.py [generate|summary] [options]
"""
import sys
from jira_worklog_report.main import main

if __name__ == "__main__":
    argv = sys.argv[1:] or ["generate"]
    sys.exit(main(argv))
