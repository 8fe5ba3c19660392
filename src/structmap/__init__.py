"""structmap — Go struct mapping code generator."""

__version__ = "0.3.0"
