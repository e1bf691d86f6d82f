"""Tree and blob node layer.

This module turns storage root paths into typed nodes.
It provides traversal, recursive copy, and text rendering over any root.
"""
