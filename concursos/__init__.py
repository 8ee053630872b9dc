"""Concursos: candidate and public contest registry with profession matching."""

__version__ = "0.1.0"
