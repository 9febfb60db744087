"""Audit trail utilities."""

from .audit import AuditEvent, AuditLog, describe_argument, sanitize_arguments, utc_timestamp

__all__ = ["AuditEvent", "AuditLog", "describe_argument", "sanitize_arguments", "utc_timestamp"]
