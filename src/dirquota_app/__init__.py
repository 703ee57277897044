"""
DirQuota App - command-line entry point for cron runs.
"""
