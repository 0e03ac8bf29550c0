"""Symbol tables, instruction lists, call frames, an interpreter and a declaration pass for the IFJ16 language."""

__version__ = "0.1.0"

__all__ = ["errors", "symbols", "instructions", "frames", "interpreter", "parser"]