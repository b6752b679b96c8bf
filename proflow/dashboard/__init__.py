"""Dashboard state and view models."""
