"""Content moderation: typed notes, classifier capability, staged pipeline."""
