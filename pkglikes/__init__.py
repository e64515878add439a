"""Package likes backed by a distributed backlink index."""

__version__ = "0.1.0"
