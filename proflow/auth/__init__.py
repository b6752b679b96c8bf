"""Anonymous identity module."""
