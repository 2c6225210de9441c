"""
Nuance Engine
Narrative ruleset resolution and diversity-gate engine.
"""

__version__ = "1.0.0"
