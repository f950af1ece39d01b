"""
schemadiff
==========

Schema diff GitHub Action for Neon database branches.

The modules are intended to be used together via the action entry point:

- :mod:`schemadiff.main`

Each run lists the project branches, resolves the compare/base pair, fetches
both schemas, renders a unified diff and keeps a single pull-request comment
in sync with it.
"""

__version__ = "1.0.0"
