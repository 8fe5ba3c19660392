"""Infrastructure layer — Go source parsing, package loading, gofmt.

This layer depends on stdlib and third-party libs (lark).
It may raise domain errors but must never import from services,
commands, or output.
"""
