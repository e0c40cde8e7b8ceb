# clockwise/api/v1/endpoints/functions.py
# The administrative functions. They answer with {"error": ...} bodies and
# carry their own CORS headers, whatever the caller's origin.
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from clockwise.core.exceptions import ClockWiseError
from clockwise.db import session
from clockwise.services import admin_functions
from clockwise.services.auth_provider import AuthProviderClient, get_auth_provider

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _json(body: dict, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(content=body, status_code=status_code, headers=CORS_HEADERS)


def _error(exc: Exception, function_name: str, fallback: str) -> JSONResponse:
    if isinstance(exc, ClockWiseError) and exc.status_code < 500:
        return _json({"error": str(exc)}, exc.status_code)
    logger.exception("Error in %s", function_name)
    return _json({"error": str(exc) or fallback}, status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.options("/admin-list-users")
@router.options("/admin-create-user")
@router.options("/seed-test-users")
def preflight():
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


@router.api_route("/admin-list-users", methods=["GET", "POST"])
async def admin_list_users(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(session.get_db),
    provider: AuthProviderClient = Depends(get_auth_provider),
):
    """ Auth users of the calling org_admin's organization. """
    try:
        users = await admin_functions.list_organization_users(db, provider, authorization)
    except Exception as exc:
        return _error(exc, "admin-list-users", "Failed to list users")
    return _json({"users": users})


@router.post("/admin-create-user")
async def admin_create_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(session.get_db),
    provider: AuthProviderClient = Depends(get_auth_provider),
):
    """ Creates a user with a temporary password in the calling org_admin's organization. """
    try:
        payload = await request.json()
    except ValueError:
        payload = {}
    try:
        user = await admin_functions.create_organization_user(db, provider, authorization, payload)
    except Exception as exc:
        return _error(exc, "admin-create-user", "Failed to create user")
    return _json({"success": True, "user": user, "message": "User created successfully"})


@router.post("/seed-test-users")
async def seed_test_users(
    db: Session = Depends(session.get_db),
    provider: AuthProviderClient = Depends(get_auth_provider),
):
    """ Provisions the fixed test accounts for the MAB organization. """
    try:
        created = await admin_functions.seed_test_users(db, provider)
    except Exception as exc:
        return _error(exc, "seed-test-users", "Failed to create test users")
    return _json({"success": True, "message": "Test users created successfully", "users": created})
