from fastapi import APIRouter, Depends

from controller.api import get_controller
from controller.models import (
    ControllerPublishVolumeRequest,
    ControllerPublishVolumeResponse,
    ControllerUnpublishVolumeRequest,
    ControllerUnpublishVolumeResponse,
    CreateVolumeRequest,
    CreateVolumeResponse,
    DeleteVolumeRequest,
    DeleteVolumeResponse,
    ListVolumesRequest,
    ListVolumesResponse,
    ValidateVolumeCapabilitiesRequest,
    ValidateVolumeCapabilitiesResponse,
)
from controller.services.controller_service import ControllerService

router = APIRouter(prefix="/csi.v0.Controller")


@router.post("/CreateVolume", response_model=CreateVolumeResponse)
def create_volume(req: CreateVolumeRequest, svc: ControllerService = Depends(get_controller)):
    return svc.create_volume(req)


@router.post("/DeleteVolume", response_model=DeleteVolumeResponse)
def delete_volume(req: DeleteVolumeRequest, svc: ControllerService = Depends(get_controller)):
    return svc.delete_volume(req)


@router.post("/ControllerPublishVolume", response_model=ControllerPublishVolumeResponse)
def controller_publish_volume(req: ControllerPublishVolumeRequest, svc: ControllerService = Depends(get_controller)):
    return svc.controller_publish_volume(req)


@router.post("/ControllerUnpublishVolume", response_model=ControllerUnpublishVolumeResponse)
def controller_unpublish_volume(req: ControllerUnpublishVolumeRequest, svc: ControllerService = Depends(get_controller)):
    return svc.controller_unpublish_volume(req)


@router.post("/ValidateVolumeCapabilities", response_model=ValidateVolumeCapabilitiesResponse)
def validate_volume_capabilities(req: ValidateVolumeCapabilitiesRequest, svc: ControllerService = Depends(get_controller)):
    return svc.validate_volume_capabilities(req)


@router.post("/ListVolumes", response_model=ListVolumesResponse)
def list_volumes(req: ListVolumesRequest, svc: ControllerService = Depends(get_controller)):
    return svc.list_volumes(req)
