"""Shared utilities used across blogsync domains."""
