from fastapi import Request

from controller.services.controller_service import ControllerService


def get_controller(request: Request) -> ControllerService:
    return request.app.state.controller
