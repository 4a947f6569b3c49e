"""
CSI Controller Service Entrypoint

FastAPI application exposing the PowerFlex CSI controller RPCs as
JSON-over-HTTP endpoints under /csi.v0.Controller/.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from controller.api import capacity, snapshot, volume
from controller.config import ControllerOptions
from controller.errors import ControllerError
from controller.services.controller_service import ControllerService

logger = logging.getLogger(__name__)


def create_app(controller: Optional[ControllerService] = None) -> FastAPI:
    app = FastAPI(title="PowerFlex CSI Controller Service")
    app.state.controller = controller or ControllerService(ControllerOptions.from_env())

    app.include_router(volume.router)
    app.include_router(capacity.router)
    app.include_router(snapshot.router)

    @app.exception_handler(ControllerError)
    def controller_error_handler(request: Request, exc: ControllerError):
        if exc.http_status >= 500:
            logger.error(f"{request.url.path} failed: {exc}")
        else:
            logger.debug(f"{request.url.path} rejected: {exc}")
        return JSONResponse(status_code=exc.http_status, content={"detail": exc.to_dict()})

    @app.get("/")
    def root():
        svc: ControllerService = app.state.controller
        return {
            "service": "csi-controller",
            "message": "PowerFlex CSI controller service running",
            "probe_state": svc.session.state.value,
        }

    return app


app = create_app()
