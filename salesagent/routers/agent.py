from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from salesagent.ai.client import CompletionClient
from salesagent.core.database import get_db
from salesagent.deps import get_completion_client
from salesagent.schemas.events import InboundEvent
from salesagent.services.agent import AgentService

router = APIRouter(prefix="/api/agent", tags=["agent"])


@router.post("/events")
def handle_event(
    event: InboundEvent,
    request: Request,
    db: Session = Depends(get_db),
    completion: CompletionClient = Depends(get_completion_client),
):
    # read back by the observability middleware for per-page metrics
    request.state.page_id = event.page_id
    outcome = AgentService(db, completion).handle_event(event)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
