"""Dependency tree structure, mutation and resolution."""
