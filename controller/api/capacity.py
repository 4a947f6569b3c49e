from fastapi import APIRouter, Depends

from controller.api import get_controller
from controller.models import (
    ControllerGetCapabilitiesResponse,
    GetCapacityRequest,
    GetCapacityResponse,
    ProbeResponse,
)
from controller.services.controller_service import ControllerService

router = APIRouter()


@router.post("/csi.v0.Controller/GetCapacity", response_model=GetCapacityResponse)
def get_capacity(req: GetCapacityRequest, svc: ControllerService = Depends(get_controller)):
    return svc.get_capacity(req)


@router.post("/csi.v0.Controller/ControllerGetCapabilities", response_model=ControllerGetCapabilitiesResponse)
def controller_get_capabilities(svc: ControllerService = Depends(get_controller)):
    return svc.controller_get_capabilities()


@router.post("/probe", response_model=ProbeResponse)
def probe(svc: ControllerService = Depends(get_controller)):
    return svc.probe()
