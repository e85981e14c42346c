"""Documentation relay for coding agents, backed by Context7."""

__version__ = "0.3.0"
