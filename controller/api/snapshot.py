from fastapi import APIRouter, Depends

from controller.api import get_controller
from controller.services.controller_service import ControllerService

router = APIRouter(prefix="/csi.v0.Controller")


@router.post("/CreateSnapshot")
def create_snapshot(svc: ControllerService = Depends(get_controller)):
    svc.create_snapshot()


@router.post("/DeleteSnapshot")
def delete_snapshot(svc: ControllerService = Depends(get_controller)):
    svc.delete_snapshot()


@router.post("/ListSnapshots")
def list_snapshots(svc: ControllerService = Depends(get_controller)):
    svc.list_snapshots()
