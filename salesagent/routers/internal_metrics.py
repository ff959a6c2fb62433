from __future__ import annotations

from fastapi import APIRouter, Depends

from salesagent.core.metrics import request_metrics
from salesagent.deps import require_internal_token

router = APIRouter(prefix="/internal/metrics", tags=["internal-metrics"])


@router.get("/pages")
def page_metrics(_auth: None = Depends(require_internal_token)):
    return {"pages": request_metrics.snapshot_per_page(), "endpoints": request_metrics.snapshot()}
