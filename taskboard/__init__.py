"""Kanban task board: Flask REST API, async client store and drag controller."""

__version__ = "0.1.0"
