"""Service layer — type resolution, code assembly, and ServiceResult-returning entry points.

Services may import from domain, config and infrastructure layers.
They must never import from commands or output.
"""
