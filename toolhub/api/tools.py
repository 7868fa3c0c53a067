"""
Tool catalog, tool page and unlock-link endpoints.

`/tool/{slug}` and `/unlock/{slug}` are page routes: anonymous visitors are
redirected to login instead of receiving a 401.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from toolhub.api.deps import (
    get_access_service,
    get_current_user_context,
    get_page_user_context,
    get_unlock_flow,
)
from toolhub.db import schemas
from toolhub.db.database import get_db
from toolhub.db.repositories import tools as tools_repo
from toolhub.services.access_service import AccessControlService
from toolhub.services.unlock_flow import UnlockFlow, UnlockState
from toolhub.utils.urls import build_tool_link

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tools"])

_UNLOCK_RESPONSES = {
    UnlockState.TOOL_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "This tool does not exist or is no longer available."),
    UnlockState.ALREADY_UNLOCKED: (status.HTTP_200_OK, "You already have access to this tool."),
    UnlockState.GRANT_FAILED: (status.HTTP_503_SERVICE_UNAVAILABLE, "We could not unlock this tool. Please try the link again."),
    UnlockState.NEWLY_UNLOCKED: (status.HTTP_200_OK, "Tool unlocked. You now have access."),
}


def _page_response(status_code: int, payload) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))


@router.get("/tools", response_model=List[schemas.Tool])
def list_tools(
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return tools_repo.list_active_tools(db)


@router.get("/me/tools", response_model=List[schemas.ToolAccess])
def list_my_tools(
    access_service: AccessControlService = Depends(get_access_service),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    return access_service.list_user_access(user.id)


@router.get("/tool/{slug}", response_model=schemas.ToolPageResult)
def open_tool(
    slug: str,
    db: Session = Depends(get_db),
    access_service: AccessControlService = Depends(get_access_service),
    user_context=Depends(get_page_user_context),
):
    user, _ = user_context
    try:
        tool = tools_repo.find_tool_by_slug(db, slug)
    except SQLAlchemyError:
        logger.exception("tool lookup failed: slug=%s", slug)
        db.rollback()
        tool = None
    if tool is None:
        return _page_response(
            status.HTTP_404_NOT_FOUND,
            schemas.ToolPageResult(state="not_found", message="This tool does not exist or is no longer available."),
        )

    tool_out = schemas.Tool.model_validate(tool)
    if not access_service.has_access(user.id, tool.id):
        return _page_response(
            status.HTTP_403_FORBIDDEN,
            schemas.ToolPageResult(
                state="access_required",
                message="You need an unlock link or an administrator grant to use this tool.",
                tool=tool_out,
            ),
        )
    return schemas.ToolPageResult(state="granted", message="Access granted.", tool=tool_out)


@router.get("/unlock/{slug}", response_model=schemas.UnlockResult)
def unlock_tool(
    slug: str,
    flow: UnlockFlow = Depends(get_unlock_flow),
    user_context=Depends(get_page_user_context),
):
    user, _ = user_context
    outcome = flow.visit(user.id, slug)
    status_code, message = _UNLOCK_RESPONSES[outcome.state]
    tool_out = schemas.Tool.model_validate(outcome.tool) if outcome.tool is not None else None
    result = schemas.UnlockResult(
        state=outcome.state.value,
        message=message,
        tool=tool_out,
        tool_url=build_tool_link(tool_out.slug) if tool_out is not None and outcome.has_access else None,
    )
    logger.info("unlock visit: user=%s slug=%s state=%s", user.id, slug, outcome.state.value)
    return _page_response(status_code, result)
