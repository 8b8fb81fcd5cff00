"""gitbridge: a version-gated bridge to the git executable."""

__version__ = "0.1.0"
