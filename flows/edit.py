import base64
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel

from imaging import ServiceError
from .errors import ValidationError

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Please select an image and enter a prompt."
EDITED_MIME_TYPE = "image/png"
DEFAULT_SAVE_NAME = "edited-image.png"


@dataclass
class SelectedImage:
    data: bytes
    mime_type: str
    filename: Optional[str] = None

    @property
    def data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class ImageInfo(BaseModel):
    mime_type: str
    size: int
    filename: Optional[str] = None


class EditResult(BaseModel):
    original: Optional[ImageInfo] = None
    prompt: str = ""
    edited_available: bool = False
    error: Optional[str] = None
    loading: bool = False
    can_generate: bool = False
    generation: int = 0


class ImageEditFlow:
    """Upload -> prompt -> remote edit -> show / save / start over.

    Every generate call is stamped with a generation number. Results that come
    back after the flow has moved on (reset, a new image, a newer generate) are
    dropped instead of being written over the current state.
    """

    def __init__(self, client):
        self.client = client
        self.original: Optional[SelectedImage] = None
        self.prompt = ""
        self.edited: Optional[bytes] = None
        self.error: Optional[str] = None
        self.loading = False
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def can_generate(self) -> bool:
        return self.original is not None and bool(self.prompt.strip()) and not self.loading

    def result(self) -> EditResult:
        original = None
        if self.original is not None:
            original = ImageInfo(
                mime_type=self.original.mime_type,
                size=len(self.original.data),
                filename=self.original.filename,
            )
        return EditResult(
            original=original,
            prompt=self.prompt,
            edited_available=self.edited is not None,
            error=self.error,
            loading=self.loading,
            can_generate=self.can_generate,
            generation=self._generation,
        )

    def select_image(self, data: bytes, mime_type: str, filename: Optional[str] = None) -> EditResult:
        self._generation += 1
        self.original = SelectedImage(data=data, mime_type=mime_type, filename=filename)
        self.edited = None
        self.error = None
        self.loading = False
        return self.result()

    def set_prompt(self, text: str) -> EditResult:
        self.prompt = text
        return self.result()

    async def generate(self, prompt: Optional[str] = None) -> EditResult:
        if prompt is not None:
            self.prompt = prompt
        original = self.original
        if original is None or not self.prompt.strip():
            self.error = MISSING_INPUT_MESSAGE
            raise ValidationError(MISSING_INPUT_MESSAGE, code="missing_input")

        self._generation += 1
        token = self._generation
        self.loading = True
        self.error = None
        self.edited = None

        try:
            edited = await self.client.edit_image(original.data, original.mime_type, self.prompt)
        except ServiceError as e:
            if self._is_current(token):
                logger.warning("Image edit failed: %s", e)
                self.error = str(e)
            else:
                logger.info("Discarding failure from stale edit generation %s", token)
        else:
            if self._is_current(token):
                self.edited = edited
            else:
                logger.info("Discarding result from stale edit generation %s", token)
        finally:
            if self._is_current(token):
                self.loading = False
        return self.result()

    def reset(self) -> EditResult:
        self._generation += 1
        self.original = None
        self.edited = None
        self.prompt = ""
        self.error = None
        self.loading = False
        return self.result()

    def save(self, destination: Union[str, Path]) -> Path:
        if self.edited is None:
            raise ValidationError("There is no edited image to save.", code="nothing_to_save")
        path = Path(destination)
        if path.is_dir():
            path = path / DEFAULT_SAVE_NAME
        path.write_bytes(self.edited)
        logger.info("Saved edited image to %s", path)
        return path

    def close(self) -> None:
        self._generation += 1

    def _is_current(self, token: int) -> bool:
        return token == self._generation
