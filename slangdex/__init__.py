"""slangdex -- a community-curated slang glossary.

Core term lifecycle engine: vote ledger, score aggregation, trending
calculation, staged content moderation, and moderator review.
"""

__version__ = "0.1.0"
