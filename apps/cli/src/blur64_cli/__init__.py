"""
Command-line entry point for blur placeholders. It:
1. Reads an image from a path, an http(s) URL or stdin
2. Generates the placeholder (using the blur64 converter package)
3. Prints {width, height, blurDataURL, placeholder} as JSON

Deployment:
    pip install blur64
    blur64 photo.jpg --size 24 --format webp
"""

from .cli import cli, main

__all__ = ["cli", "main"]
