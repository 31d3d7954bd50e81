"""Hacker News keyword watcher."""
