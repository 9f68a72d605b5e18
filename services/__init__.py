"""Vultr service façades and their shared contracts."""
