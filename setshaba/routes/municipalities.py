"""
Municipality directory - public, read-only reference data.
"""

import logging

from fastapi import APIRouter, Depends

from setshaba.core.errors import InternalError, NotFound
from setshaba.dependencies import get_municipality_service
from setshaba.models.base import ApiResponse
from setshaba.models.municipality import MunicipalityListPayload, MunicipalityPayload
from setshaba.services.municipality_service import MunicipalityService, summarize

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/municipalities", tags=["Municipalities"])


@router.get("", response_model=ApiResponse[MunicipalityListPayload])
def list_municipalities(service: MunicipalityService = Depends(get_municipality_service)):
    try:
        municipalities = [summarize(m) for m in service.list_municipalities()]
    except Exception as e:
        logger.error(f"Get municipalities failed: {e}", exc_info=True)
        raise InternalError() from e
    return ApiResponse(data=MunicipalityListPayload(municipalities=municipalities))


@router.get("/{municipality_id}", response_model=ApiResponse[MunicipalityPayload])
def get_municipality(municipality_id: str, service: MunicipalityService = Depends(get_municipality_service)):
    try:
        municipality = service.get_municipality(municipality_id)
    except Exception as e:
        logger.error(f"Get municipality {municipality_id} failed: {e}", exc_info=True)
        raise InternalError() from e
    if municipality is None:
        raise NotFound("Municipality not found")
    return ApiResponse(data=MunicipalityPayload(municipality=summarize(municipality)))
