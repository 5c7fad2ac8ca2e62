# SPDX-License-Identifier: Apache-2.0
"""API Routes for FaceScan

- POST /api/analyze-face (alias /api/analisar-rosto) - vision LLM verdict
- POST /api/metrics - local landmark metrics and overlay
"""

import logging
import threading
from typing import Dict, Any, Optional

import numpy as np
from fastapi import APIRouter, HTTPException, UploadFile, File, Form, Response
from fastapi.concurrency import run_in_threadpool

from facescan.errors import InvalidFrameError, NoFaceDetectedError
from facescan.insights import score_bars
from facescan.overlay import OverlayMode
from facescan.pipeline import FaceScanPipeline
from facescan.verdict import FaceVerdict

from .core.schemas import ErrorResponse, MetricsResponse
from .core.utils import generate_request_id, image_to_base64, validate_image
from .llm import LLMRouter, LLMError, LLMValidationError
from .llm.prompts import SYSTEM_PROMPT, FACE_PROMPT
from .settings import SETTINGS


logger = logging.getLogger(__name__)
router = APIRouter()

ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in (400, 422, 502, 503)}

_pipeline: Optional[FaceScanPipeline] = None
_pipeline_lock = threading.Lock()


def get_router() -> LLMRouter:
    """Build the LLM router from settings; ValueError when no provider key is set."""
    openai_cfg, anthropic_cfg = SETTINGS.llm_configs()
    return LLMRouter.from_config(
        provider=SETTINGS.provider,
        openai_config=openai_cfg,
        anthropic_config=anthropic_cfg,
        max_retries=SETTINGS.max_retries
    )


def get_pipeline() -> FaceScanPipeline:
    """Shared still-image pipeline backed by MediaPipe Face Mesh."""
    global _pipeline
    if _pipeline is None:
        from facescan.config import load_config
        from facescan.landmarks import MediaPipeLandmarkSource

        config = load_config()
        detector = config.detector.model_copy(update={"static_image_mode": True})
        _pipeline = FaceScanPipeline(MediaPipeLandmarkSource(detector), config)
    return _pipeline


async def _read_photo(photo: Optional[UploadFile], headers: Dict[str, str]):
    if photo is None:
        raise HTTPException(status_code=400, detail="No photo uploaded", headers=headers)
    data = await photo.read()
    try:
        image, metadata = validate_image(data, photo.filename, SETTINGS.max_upload_mb, SETTINGS.max_image_megapixels)
    except HTTPException as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail, headers=headers)
    return data, image, metadata


@router.post("/analyze-face", responses=ERROR_RESPONSES)
async def analyze_face_endpoint(
    response: Response,
    photo: Optional[UploadFile] = File(None)
) -> Dict[str, Any]:
    """
    Send the uploaded photo to the configured vision LLM and return its verdict.
    """
    return await _analyze_face(response, photo)


@router.post("/analisar-rosto", responses=ERROR_RESPONSES)
async def analisar_rosto_endpoint(
    response: Response,
    photo: Optional[UploadFile] = File(None),
    foto: Optional[UploadFile] = File(None)
) -> Dict[str, Any]:
    """
    Legacy route; the Portuguese front end uploads the picture as ``foto``.
    """
    return await _analyze_face(response, photo or foto)


async def _analyze_face(response: Response, photo: Optional[UploadFile]) -> Dict[str, Any]:
    request_id = generate_request_id()
    headers = {"X-Request-ID": request_id}
    response.headers["X-Request-ID"] = request_id
    logger.info(f"Face analysis request {request_id} started")

    data, _, metadata = await _read_photo(photo, headers)

    try:
        llm_router = get_router()
    except ValueError as e:
        logger.error(f"Face analysis request {request_id}: {e}")
        raise HTTPException(status_code=503, detail="No vision model provider configured", headers=headers)

    try:
        llm_response = await run_in_threadpool(
            llm_router.complete_with_fallback,
            system=SYSTEM_PROMPT,
            user=FACE_PROMPT,
            schema=FaceVerdict,
            max_output_tokens=SETTINGS.max_output_tokens,
            image_data=data,
            image_mime_type=metadata["mime_type"]
        )
    except LLMValidationError as e:
        logger.error(f"Face analysis request {request_id}: invalid model reply: {e}")
        raise HTTPException(status_code=502, detail="The model reply did not contain valid JSON", headers=headers)
    except LLMError as e:
        logger.error(f"Face analysis request {request_id} failed: {e}")
        raise HTTPException(status_code=502, detail=f"Vision model request failed: {e}", headers=headers)

    usage = llm_response.usage
    logger.info(
        f"Face analysis request {request_id} completed "
        f"({usage.provider}/{usage.model}, in={usage.input_tokens}, out={usage.output_tokens})"
    )
    return llm_response.content


@router.post("/metrics", response_model=MetricsResponse, responses=ERROR_RESPONSES)
async def metrics_endpoint(
    response: Response,
    photo: Optional[UploadFile] = File(None),
    mode: str = Form(OverlayMode.MESH.value)
) -> MetricsResponse:
    """
    Run the local landmark metrics on the uploaded photo and return scores and overlay.
    """
    request_id = generate_request_id()
    headers = {"X-Request-ID": request_id}
    response.headers["X-Request-ID"] = request_id
    logger.info(f"Metrics request {request_id} started")

    try:
        overlay_mode = OverlayMode(mode)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown mode '{mode}'; expected mesh or heatmap", headers=headers)

    _, image, _ = await _read_photo(photo, headers)
    frame = np.asarray(image, dtype=np.uint8)

    def _run():
        pipeline = get_pipeline()
        with _pipeline_lock:
            return pipeline.analyze_frame(frame, overlay_mode)

    try:
        result = await run_in_threadpool(_run)
    except NoFaceDetectedError:
        raise HTTPException(status_code=422, detail="No face detected in photo", headers=headers)
    except InvalidFrameError as e:
        raise HTTPException(status_code=400, detail=str(e), headers=headers)
    except ImportError as e:
        logger.error(f"Metrics request {request_id}: landmark detector unavailable: {e}")
        raise HTTPException(status_code=503, detail="Landmark detector not installed (pip install facescan[mediapipe])", headers=headers)

    logger.info(f"Metrics request {request_id} completed")
    return MetricsResponse(
        scores=result.state.model_dump(exclude={"insight"}),
        bars=score_bars(result.state),
        insights=result.insights,
        mode=overlay_mode.value,
        overlay_png_base64=image_to_base64(result.overlay),
        landmarks=len(result.landmarks),
        request_id=request_id
    )
