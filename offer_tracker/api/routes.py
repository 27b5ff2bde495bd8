# offer_tracker/api/routes.py
from fastapi import APIRouter, Depends, HTTPException, Request
from typing import List
from .. import errors, schemas
from ..poller import Poller
from ..services import TrackerService
from ..utils import logger

router = APIRouter()

def get_service(request: Request) -> TrackerService:
    return request.app.state.service

def get_poller(request: Request) -> Poller:
    return request.app.state.poller

def _http_error(e: errors.TrackerError) -> HTTPException:
    if isinstance(e, errors.NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))

@router.get("/health")
def health():
    return {"status": "ok"}

@router.get("/trackers", response_model=List[schemas.TrackerOut])
def list_trackers(service: TrackerService = Depends(get_service)):
    return service.list_trackers()

@router.get("/products", response_model=List[schemas.Product])
def list_products(service: TrackerService = Depends(get_service)):
    return service.list_products()

@router.post("/trackers", response_model=schemas.TrackerOut, status_code=201)
def create_tracker(payload: schemas.TrackerCreate, service: TrackerService = Depends(get_service)):
    try:
        return service.create(
            payload.search_term,
            payload.min_price,
            payload.max_price,
            payload.condition,
            payload.location,
            payload.notify_address,
        )
    except errors.TrackerError as e:
        raise _http_error(e)

@router.delete("/trackers/{tracker_id}")
def delete_tracker(tracker_id: str, service: TrackerService = Depends(get_service)):
    try:
        service.delete(tracker_id)
    except errors.TrackerError as e:
        raise _http_error(e)
    return {"success": True}

@router.post("/trackers/{tracker_id}/confirm", response_model=schemas.TrackerOut)
def confirm_tracker(tracker_id: str, payload: schemas.ConfirmRequest, service: TrackerService = Depends(get_service)):
    try:
        return service.confirm(tracker_id, payload.code)
    except errors.TrackerError as e:
        raise _http_error(e)

@router.post("/trackers/{tracker_id}/resend-code")
def resend_code(tracker_id: str, service: TrackerService = Depends(get_service)):
    try:
        service.resend_code(tracker_id)
    except errors.TrackerError as e:
        raise _http_error(e)
    return {"success": True}

@router.post("/poll")
def trigger_poll(poller: Poller = Depends(get_poller)):
    try:
        found = poller.run_cycle()
    except Exception as e:
        logger.exception("Poll failed: %s", e)
        raise HTTPException(status_code=500, detail="Poll failed")
    return {"newProducts": found}
