"""Notification engine: fan-out, stock alerts, templates and delivery routing."""
