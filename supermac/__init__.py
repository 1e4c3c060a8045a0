"""SuperMac: shortcuts for everyday macOS settings and diagnostics."""

__all__ = ["cli", "registry", "shell", "system_state"]
__version__ = "2.1.0"
