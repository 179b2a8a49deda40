"""Core run orchestration, settings and helpers."""
