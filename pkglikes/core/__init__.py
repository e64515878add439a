"""Core domain module."""
