"""Terminal rendering and prompts for the vmetal CLI."""
