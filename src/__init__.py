"""Specflow - spec-driven development agent workbench.

Runs a fixed pipeline of role-based LLM agents and keeps the
documents they produce under simple version control.
"""

__version__ = "0.1.0"
