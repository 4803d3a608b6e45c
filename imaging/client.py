import base64
import logging
from typing import Optional

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-image"


class ImagingError(Exception):
    pass


class ConfigurationError(ImagingError):
    pass


class ServiceError(ImagingError):
    pass


class NoImageInResponseError(ServiceError):
    def __init__(self, message: str = "No image data found in the API response."):
        super().__init__(message)


def extract_image(response) -> bytes:
    """Return the first inline image payload of a generate_content response."""
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                data = inline.data
                if isinstance(data, str):
                    data = base64.b64decode(data)
                return data
        # Only the first candidate is considered.
        break
    raise NoImageInResponseError()


class ImageEditClient:
    def __init__(self, api_key: Optional[str], model: str = DEFAULT_MODEL, client=None):
        if not api_key and client is None:
            raise ConfigurationError("API_KEY environment variable not set.")
        self.model = model
        self.client = client or genai.Client(api_key=api_key)

    @classmethod
    def from_settings(cls, settings) -> "ImageEditClient":
        return cls(api_key=settings.api_key, model=settings.image_model)

    async def edit_image(self, image: bytes, mime_type: str, prompt: str) -> bytes:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=[
                    types.Part.from_bytes(data=image, mime_type=mime_type),
                    types.Part.from_text(text=prompt),
                ],
                config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
            )
        except Exception as e:
            logger.error("Error calling Gemini API: %s", e)
            raise ServiceError(f"Failed to edit image: {e}") from e

        try:
            return extract_image(response)
        except NoImageInResponseError as e:
            logger.error("Gemini returned no image for model %s", self.model)
            raise NoImageInResponseError(f"Failed to edit image: {e}") from e
