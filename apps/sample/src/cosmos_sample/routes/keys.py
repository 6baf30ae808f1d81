"""Credential key switching routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from cosmos_data import CosmosDbFactory
from cosmos_data.exceptions import ConfigurationError
from cosmos_sample.models.keys import KeySwitchResponse
from cosmos_sample.services import get_cosmos_factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/keys", tags=["keys"])


@router.post("/primary", response_model=KeySwitchResponse)
def switch_to_primary_key(factory: CosmosDbFactory = Depends(get_cosmos_factory)) -> KeySwitchResponse:
    try:
        factory.switch_to_primary_key()
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return KeySwitchResponse(key="primary", message="Switched to primary key")


@router.post("/secondary", response_model=KeySwitchResponse)
def switch_to_secondary_key(factory: CosmosDbFactory = Depends(get_cosmos_factory)) -> KeySwitchResponse:
    """Use the secondary key for subsequent requests, e.g. while the primary is regenerated."""
    try:
        factory.switch_to_secondary_key()
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    logger.info("Requests now use the secondary key")
    return KeySwitchResponse(key="secondary", message="Switched to secondary key")
