"""Encoding and validation helpers for keytree."""
