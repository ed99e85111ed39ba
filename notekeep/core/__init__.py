"""
Core utilities shared across notekeep.

This package hosts configuration (env vars, data paths, backend selection)
and cross-cutting helpers such as logging. Stores and services depend on
these primitives instead of reading the environment themselves.
"""
