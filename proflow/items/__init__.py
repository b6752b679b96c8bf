"""Work item module."""
