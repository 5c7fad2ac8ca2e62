# SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for acquisition, detection and scoring."""

from __future__ import annotations


class FaceScanError(Exception):
    """Base exception for FaceScan failures."""


class CameraUnavailableError(FaceScanError):
    """Camera could not be opened or read (missing device or permission)."""


class NoFaceDetectedError(FaceScanError):
    """The landmark source found no face in the frame."""


class InvalidFrameError(FaceScanError):
    """Frame is not an RGB(A) uint8 image or could not be decoded."""


class RemoteClassifierError(FaceScanError):
    """The remote classifier call failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
