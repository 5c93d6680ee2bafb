"""A small content-addressed version control system with blobs, trees, commits and branches."""

__version__ = "0.1.0"