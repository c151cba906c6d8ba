"""pytest-bdd entry point for the feature files under ``features/``."""
