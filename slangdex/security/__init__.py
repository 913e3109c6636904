"""Audit trail for moderation activity."""
