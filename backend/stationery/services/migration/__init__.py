"""One-shot data migrations."""
