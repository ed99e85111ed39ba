"""
Use cases of notekeep.

Services orchestrate document stores and the language service: loading the
note repository with defaults and migrations, saving it, exporting and
importing repository files. Routers call these services and never a store
directly.
"""
