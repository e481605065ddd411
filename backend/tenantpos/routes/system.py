# backend/tenantpos/routes/system.py
"""System health endpoint."""

import time

from flask import Blueprint

from ..extensions import db
from ..responses import ok
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


@system_bp.get("/api/health")
def health_route():
    start_time = time.time()
    db.session.execute(db.text("SELECT 1"))
    elapsed_ms = (time.time() - start_time) * 1000
    return ok({
        "status": "healthy",
        "database": {"status": "healthy", "response_time_ms": round(elapsed_ms, 2)},
        "timestamp": to_utc_z(utcnow()),
    })
