from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from ..clients.frontapp import FrontappAPI
from ..core.context import RequestContext
from ..core.security import require_api_key
from ..dependencies import get_frontapp_client, get_request_context, get_tool_registry
from ..tools.envelope import ErrorCode, ToolResponse
from ..tools.registry import ToolRegistry

router = APIRouter(prefix="/tools", tags=["tools"], dependencies=[Depends(require_api_key)])

ERROR_STATUS = {
    ErrorCode.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.EXTERNAL: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(response: ToolResponse) -> int:
    if not response.is_error:
        return status.HTTP_200_OK
    return ERROR_STATUS.get(ErrorCode(response.code), status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get("")
async def list_tools(registry: ToolRegistry = Depends(get_tool_registry)) -> dict[str, Any]:
    return {"status": "success", "data": [descriptor.to_dict() for descriptor in registry.descriptors()]}


@router.post("/{tool_name}")
async def call_tool(
    tool_name: str,
    body: Any = Body(default=None),
    registry: ToolRegistry = Depends(get_tool_registry),
    client: FrontappAPI = Depends(get_frontapp_client),
    ctx: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    if body is not None and not isinstance(body, dict):
        return JSONResponse(
            ToolResponse.error("Request body must be a JSON object", code=ErrorCode.VALIDATION).to_dict(),
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    arguments = (body or {}).get("arguments")
    ctx.logger.info("tool_call_received", tool=tool_name)
    response = await registry.dispatch(tool_name, arguments, client=client, ctx=ctx)
    return JSONResponse(response.to_dict(), status_code=status_for(response))


__all__ = ["ERROR_STATUS", "router", "status_for"]
