"""
Background Tasks.

Taskiq-based task queue for the notification worker and the daily
deadline scans.

Usage:
    # Start worker
    python cli.py --service worker

    # Start scheduler (one instance only)
    python cli.py --service scheduler
"""
