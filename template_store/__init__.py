"""Relational store for named templates and the substitutes they own."""

__version__ = "0.1.0"
