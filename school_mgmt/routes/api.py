# school_mgmt/routes/api.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from school_mgmt.core.database import get_db
from school_mgmt.core.dispatcher import HTTP_METHODS

router = APIRouter()


@router.api_route("/api/{module_name}/{fn_name}", methods=list(HTTP_METHODS), tags=["API"])
async def dispatch(
    module_name: str,
    fn_name: str,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """Single entry point for every exposed service operation."""
    return await request.app.state.dispatcher.dispatch(request, module_name, fn_name, db)


@router.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy"}


@router.get("/list-endpoints", tags=["Health"])
async def list_endpoints(request: Request):
    return {"endpoints": request.app.state.dispatcher.list_endpoints()}
