"""Mock remote sync endpoint for local development and tests."""
