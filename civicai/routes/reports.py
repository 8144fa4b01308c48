"""
Report analysis and reference data routes

- POST /api/reports/analyze: run the analysis pipeline on a captured photo
- GET  /api/authorities: static authority registry
- GET  /api/geocode: forward geocoding for manual address entry
"""
import base64
import binascii
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, status

from civicai.agents.orchestrator import AnalysisPipeline
from civicai.dependencies import get_geocoder, get_pipeline, get_registry
from civicai.exceptions import GeocodingError
from civicai.models.schemas import AnalysisReport, AnalysisSubmission, AnalyzeRequest
from civicai.models.ticket import Authority, Coordinates
from civicai.services.authorities import AuthorityRegistry
from civicai.services.geocoding import GeocodingClient
from civicai.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["reports"])


def split_data_url(image_base64: str) -> Tuple[Optional[str], str]:
    """
    Split "data:<mime>;base64,<payload>" into (mime, payload)

    Plain base64 input returns (None, input).

    Raises:
        ValueError: If a data URL has no payload separator
    """
    if not image_base64.startswith("data:"):
        return None, image_base64

    head, sep, payload = image_base64.partition(",")
    if not sep:
        raise ValueError("Invalid data URL: missing ',' before the payload")
    mime_type = head[len("data:"):].split(";", 1)[0].strip()
    return mime_type or None, payload


def decode_image(image_base64: str) -> bytes:
    """
    Decode a base64 image, accepting data URLs ("data:image/jpeg;base64,...")

    Raises:
        ValueError: If the data URL is malformed or the payload is not valid base64
    """
    _, payload = split_data_url(image_base64)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image: {e}") from e
    if not data:
        raise ValueError("Empty image payload")
    return data


@router.post("/reports/analyze", response_model=AnalysisReport, response_model_by_alias=True)
async def analyze_report(
    request: AnalyzeRequest,
    pipeline: AnalysisPipeline = Depends(get_pipeline)
):
    """
    Detect the issue and draft the complaint

    Detection failures return the fallback analysis; drafting failures
    return 502 so the citizen can retry from the capture step.
    """
    try:
        data_url_mime, _ = split_data_url(request.image_base64)
        image = decode_image(request.image_base64)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    submission = AnalysisSubmission(
        image=image,
        # The data URL header describes the payload actually sent
        mime_type=data_url_mime or request.mime_type,
        user_prompt=request.user_prompt,
        location=request.location,
        address=request.address,
    )
    return await pipeline.analyze(submission)


@router.get("/authorities", response_model=List[Authority], response_model_by_alias=True)
async def list_authorities(registry: AuthorityRegistry = Depends(get_registry)):
    """
    List the authority registry
    """
    return registry.all()


@router.get("/geocode", response_model=Coordinates)
async def geocode(
    q: str = Query(..., min_length=1, description="Place or address text"),
    geocoder: GeocodingClient = Depends(get_geocoder)
):
    """
    Forward geocode free text
    """
    try:
        location = await geocoder.forward(q)
    except GeocodingError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    if location is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No match for '{q}'")
    return location
