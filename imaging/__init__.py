"""
Image Editing Package

Thin adapter around the Gemini image model: sends an image plus an
instruction and returns the edited image bytes.
"""

from .client import (
    ImageEditClient,
    ImagingError,
    ConfigurationError,
    ServiceError,
    NoImageInResponseError,
    extract_image,
)

__all__ = [
    "ImageEditClient",
    "ImagingError",
    "ConfigurationError",
    "ServiceError",
    "NoImageInResponseError",
    "extract_image",
]
