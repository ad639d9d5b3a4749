"""
Pure builders of the desired objects: one function per object kind.

Same spec in, byte-identical objects out. No timestamps, no randomness,
no API calls. Builders can return ``None`` if the object is not needed.
"""
