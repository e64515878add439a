"""Providers module."""
