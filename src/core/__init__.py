"""
Core infrastructure for planner-press.

Logging setup shared by the assembly engine, the network layer and the CLI.
"""

__version__ = "1.0.0"
