"""
Games module - Card content for the engine.

Each game has its own subpackage with its card tables and a setup
helper that builds a ready-to-play state.
"""
