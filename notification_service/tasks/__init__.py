"""Background scheduling.

- scheduler.py: APScheduler integration for the periodic pending-job drain
"""
