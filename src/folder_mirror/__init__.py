"""One-way folder mirroring daemon."""

__version__ = "1.0.0"
