"""Assembler for a small line-oriented language and fetch/dispatch core of a 32-bit register machine."""

__version__ = "0.1.0"