"""Smart tag detection module."""
