"""Domain layer — tags, templates, field descriptors, matching and conversions.

This layer depends only on stdlib and jinja2.
It must never import from services, infrastructure, commands, or output.
"""
