# clockwise/services/admin_functions.py
# Administrative operations behind the admin-list-users, admin-create-user and seed-test-users functions.
import logging
import secrets
import string
from typing import List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from clockwise.core.exceptions import (AuthorizationError, AuthProviderError, ClockWiseError, MissingOrganizationError,
                                       NotFoundError, ValidationError)
from clockwise.core.security import bearer_token, decode_access_token
from clockwise.db import models
from clockwise.schemas.user import NewUser
from clockwise.services.auth_provider import AuthProviderClient
from clockwise.services.roles import Role, StoredRole, to_stored_role

logger = logging.getLogger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*"
TEMP_PASSWORD_LENGTH = 16
# Roles that are not tied to a single department.
ORGANIZATION_WIDE_ROLES = (StoredRole.ORG_ADMIN, StoredRole.PROGRAM_MANAGER)

SEED_ORGANIZATION_CODE = "MAB"
SEED_DEPARTMENT_CODE = "CS"
SEED_PROGRAM_CODE = "BSCS"
SEED_PASSWORD = "Test@567"

# (email, full name, stored role, gets the seed department, gets the seed program)
SEED_ACCOUNTS = (
    ("admin2@mab.com", "Admin User 2", StoredRole.ORG_ADMIN, False, False),
    ("hod2@mab.com", "HOD User 2", StoredRole.HOD, True, False),
    ("faculty2@mab.com", "Faculty User 2", StoredRole.FACULTY, True, True),
)


def _require_org_admin(db: Session, authorization: Optional[str]) -> Tuple[str, str]:
    """(caller id, organization id) for an org_admin caller attached to an organization."""
    claims = decode_access_token(bearer_token(authorization))
    caller_id = claims["sub"]

    roles = db.query(models.UserRole).filter(models.UserRole.user_id == caller_id).all()
    if len(roles) != 1 or roles[0].role != StoredRole.ORG_ADMIN.value:
        logger.error("Role check failed for user %s", caller_id)
        raise AuthorizationError("Forbidden - Admin access required")

    organization_id = roles[0].organization_id
    if not organization_id:
        logger.error("Admin %s has no organization assigned", caller_id)
        raise MissingOrganizationError("Admin has no organization assigned")
    return caller_id, organization_id


async def list_organization_users(db: Session, provider: AuthProviderClient,
                                  authorization: Optional[str]) -> List[dict]:
    """
    Auth provider user records for the caller's organization. The caller must be
    an org_admin attached to an organization.
    """
    _, organization_id = _require_org_admin(db, authorization)

    org_user_ids = {
        user_id for (user_id,) in
        db.query(models.UserRole.user_id).filter(models.UserRole.organization_id == organization_id).all()
    }
    auth_users = await provider.list_users()
    users = [u for u in auth_users if u.get("id") in org_user_ids]

    logger.info("Listed %d users for organization %s", len(users), organization_id)
    return users


def _stored_role(role: str) -> StoredRole:
    """Accepts display or stored role codes."""
    try:
        return to_stored_role(Role(role))
    except ValueError:
        pass
    try:
        return StoredRole(role)
    except ValueError:
        raise ValidationError({"role": f"Unknown role: {role}"})


def parse_new_user(payload: dict) -> NewUser:
    if not payload.get("full_name") or not payload.get("email") or not payload.get("role"):
        raise ClockWiseError("Missing required fields")
    if len(payload["full_name"]) > 100 or len(payload["email"]) > 255:
        raise ClockWiseError("Input exceeds maximum length")
    try:
        return NewUser.model_validate(payload)
    except PydanticValidationError as exc:
        errors = {}
        for error in exc.errors():
            errors.setdefault(str(error["loc"][0]) if error["loc"] else "__root__", error["msg"])
        raise ValidationError(errors)


def temporary_password() -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(TEMP_PASSWORD_LENGTH))


async def create_organization_user(db: Session, provider: AuthProviderClient, authorization: Optional[str],
                                   payload: dict) -> dict:
    """
    Creates an auth account with a random temporary password, then its profile
    and role row inside the calling admin's organization.
    """
    _, organization_id = _require_org_admin(db, authorization)
    new_user = parse_new_user(payload)
    role = _stored_role(new_user.role)

    department_id = None if role in ORGANIZATION_WIDE_ROLES else new_user.department_id
    if department_id:
        department = db.query(models.Department).filter(
            models.Department.id == department_id, models.Department.organization_id == organization_id
        ).first()
        if not department:
            raise NotFoundError("Department not found")

    auth_user = await provider.create_user(
        email=new_user.email,
        password=temporary_password(),
        email_confirm=True,
        user_metadata={"full_name": new_user.full_name},
    )
    user_id = auth_user.get("id") or auth_user.get("user", {}).get("id")

    profile = db.query(models.Profile).filter(models.Profile.id == user_id).first()
    if profile is None:
        profile = models.Profile(id=user_id, full_name=new_user.full_name)
        db.add(profile)
    profile.full_name = new_user.full_name
    profile.phone = new_user.phone or None
    profile.is_active = new_user.is_active

    db.add(models.UserRole(
        user_id=user_id, role=role.value, organization_id=organization_id, department_id=department_id
    ))
    if department_id:
        db.add(models.UserDepartment(user_id=user_id, department_id=department_id))
    db.commit()

    logger.info("User created successfully: %s", user_id)
    return auth_user


def _id_for_code(db: Session, model, code: str) -> Optional[str]:
    row = db.query(model).filter(model.code == code).first()
    return row.id if row else None


async def seed_test_users(db: Session, provider: AuthProviderClient) -> List[dict]:
    """Creates the fixed test accounts. Accounts whose email is already registered are skipped."""
    organization_id = _id_for_code(db, models.Organization, SEED_ORGANIZATION_CODE)
    if organization_id is None:
        raise NotFoundError("Organization not found")
    department_id = _id_for_code(db, models.Department, SEED_DEPARTMENT_CODE)
    program_id = _id_for_code(db, models.Program, SEED_PROGRAM_CODE)

    created = []
    for email, full_name, role, with_department, with_program in SEED_ACCOUNTS:
        logger.info("Creating user: %s", email)
        try:
            auth_user = await provider.create_user(
                email=email, password=SEED_PASSWORD, email_confirm=True, user_metadata={"full_name": full_name}
            )
        except AuthProviderError as exc:
            if "already been registered" in exc.message:
                logger.info("User %s already exists, skipping", email)
                continue
            logger.error("Error creating %s: %s", email, exc.message)
            raise

        user_id = auth_user.get("id") or auth_user.get("user", {}).get("id")
        user_department = department_id if with_department else None
        user_program = program_id if with_program else None

        profile = db.query(models.Profile).filter(models.Profile.id == user_id).first()
        if profile is None:
            profile = models.Profile(id=user_id, full_name=full_name)
            db.add(profile)
        profile.full_name = full_name
        profile.is_active = True

        db.add(models.UserRole(
            user_id=user_id,
            role=role.value,
            organization_id=organization_id,
            department_id=user_department,
            program_id=user_program,
        ))
        if user_department:
            db.add(models.UserDepartment(user_id=user_id, department_id=user_department))
        if user_program:
            db.add(models.UserProgram(user_id=user_id, program_id=user_program))
        db.commit()

        created.append({"email": email, "role": role.value, "id": user_id})
        logger.info("Successfully created user: %s", email)
    return created
