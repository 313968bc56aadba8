"""A small statically typed expression language: syntax trees, a type analyzer and an interpreter."""

__version__ = "0.1.0"