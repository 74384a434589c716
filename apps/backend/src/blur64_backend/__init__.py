"""
blur64 Backend - Flask API for blur placeholders

This app is deployed next to a frontend that renders images. It:
1. Accepts an image URL (JSON) or an uploaded file (multipart)
2. Generates a blur placeholder with the configured fetch defaults
3. Returns {width, height, blurDataURL, placeholder}

Deployment:
    pip install blur64
    flask --app blur64_backend.app:create_app run
"""

from .app import create_app
from .config import Config

__all__ = ["create_app", "Config"]
