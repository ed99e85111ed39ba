"""Bundled text resources."""
