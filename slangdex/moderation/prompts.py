"""Prompt templates for the LLM-backed moderation stages.

Each template uses ``{placeholder}`` syntax for variable substitution via
``str.format()``.
"""

# ---------------------------------------------------------------------------
# Classifier payload
# ---------------------------------------------------------------------------

TERM_PAYLOAD = """\
Term: {text}
Definition: {definition}
Example: {example}"""

# ---------------------------------------------------------------------------
# Profanity detection
# ---------------------------------------------------------------------------

PROFANITY_SYSTEM_PROMPT = """\
You are a profanity detector. Respond with JSON indicating if the input \
contains any profanity, slurs, or offensive language. \
Format: { "containsProfanity": boolean, "reason": string }

Return ONLY the JSON object (no markdown fences, no commentary)."""
