"""install-unity: install Unity editor versions side by side."""

__version__ = "0.1.0"
