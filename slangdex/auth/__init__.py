"""Moderator accounts and sessions."""
