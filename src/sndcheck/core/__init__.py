"""Core numerics, configuration and logging for sndcheck."""
