# SPDX-License-Identifier: Apache-2.0
"""Client for the remote face classifier endpoint."""

from __future__ import annotations

import mimetypes
from pathlib import Path

import requests
from pydantic import ValidationError

from .errors import RemoteClassifierError
from .logging_utils import get_logger
from .verdict import FaceVerdict

LOGGER = get_logger(__name__)

DEFAULT_URL = "http://localhost:3000/api/analyze-face"


class RemoteClassifier:
    """Posts a photo to the classifier server and returns its verdict."""

    def __init__(self, url: str = DEFAULT_URL, timeout: float = 60.0):
        self.url = url
        self.timeout = timeout

    def classify(self, image: bytes, filename: str = "photo.jpg") -> FaceVerdict:
        mime = mimetypes.guess_type(filename)[0] or "image/jpeg"
        try:
            resp = requests.post(
                self.url,
                files={"photo": (filename, image, mime)},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RemoteClassifierError(f"classifier unreachable: {e}") from e

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = None
            detail = body.get("error", resp.text) if isinstance(body, dict) else resp.text
            raise RemoteClassifierError(f"classifier error: {detail}", status_code=resp.status_code)

        try:
            verdict = FaceVerdict.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise RemoteClassifierError(f"invalid classifier payload: {e}", status_code=resp.status_code) from e
        LOGGER.info("remote verdict received", face_shape=verdict.face_shape, suggestions=len(verdict.suggestions))
        return verdict

    def classify_file(self, path: Path | str) -> FaceVerdict:
        path = Path(path)
        return self.classify(path.read_bytes(), path.name)
