"""Example applications built on mcpkit."""
