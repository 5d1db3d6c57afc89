"""Syntax tree for just-env scripts."""
