"""
FastAPI Server for Display Orientation Audits

Provides REST endpoints so kiosk fleets can be audited remotely and
orientation values can be reconciled without shell access.
"""

import logging
from typing import Optional
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from display_audit.audit import OrientationAudit, reconcile_values
from display_audit.cli import parse_rotation
from display_audit.config.audit_config import AuditConfig
from display_audit.orientation.calibration import format_matrix, libinput_calibration, touch_matrix

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Display Orientation Audit API",
    description="Read-only orientation audit for Linux kiosk and media-player displays",
    version="1.0.0",
)

# Add CORS middleware for dashboard access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str


class ReconcileRequest(BaseModel):
    """Raw orientation values for one display"""
    display_id: str = "console"
    cmdline: Optional[str] = None  # fbcon rotate index 0-3
    panel: Optional[str] = None  # DRM panel_orientation
    compositor: Optional[str] = None  # xrandr rotation word
    overlay: Optional[str] = None  # dtoverlay line or rotate=/orientation= params
    panel_evidence: bool = False


class TouchMatrixResponse(BaseModel):
    """Touch calibration for a rotation"""
    degrees: int
    matrix: str
    libinput_calibration: str


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(status="healthy", version="1.0.0")


@app.get("/audit")
def run_audit(timeout: float = 5.0, compositor: bool = True, input_tools: bool = True):
    """
    Run an orientation audit on this host.

    Returns per-display records, the signals they were built from,
    suggestions and the raw collector facts.
    """
    try:
        config = AuditConfig(
            probe_timeout=timeout,
            use_compositor=compositor,
            use_input_tools=input_tools,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        logger.info("Running orientation audit")
        report = OrientationAudit(config).run()
        logger.info(f"Audit complete: {len(report.records)} display(s), primary {report.primary_id}")
        return report.to_dict()
    except Exception as e:
        logger.error(f"Audit error: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/reconcile")
async def reconcile(request: ReconcileRequest):
    """Reconcile supplied raw values into one orientation record."""
    record = reconcile_values(
        cmdline=request.cmdline,
        panel=request.panel,
        compositor=request.compositor,
        overlay=request.overlay,
        panel_evidence=request.panel_evidence,
        display_id=request.display_id,
    )
    return record.to_dict()


@app.get("/touch-matrix/{rotation}", response_model=TouchMatrixResponse)
async def get_touch_matrix(rotation: str):
    """Get touch calibration for a rotation given in degrees or as an xrandr word."""
    angle = parse_rotation(rotation)
    if not angle.is_known:
        raise HTTPException(status_code=400, detail=f"Unrecognized rotation: {rotation}")

    return TouchMatrixResponse(
        degrees=angle.degrees,
        matrix=format_matrix(touch_matrix(angle)),
        libinput_calibration=libinput_calibration(angle),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
