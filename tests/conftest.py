import os
import time

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "https://auth.test")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clockwise.core.config import settings
from clockwise.core.exceptions import AuthProviderError
from clockwise.db import models, session
from clockwise.main import app
from clockwise.services.auth_provider import get_auth_provider


class FakeAuthProvider:
    def __init__(self):
        self.users = []
        self.fail_list = False
        self.created = []

    async def list_users(self):
        if self.fail_list:
            raise AuthProviderError("Auth provider unreachable")
        return list(self.users)

    async def create_user(self, *, email, password, email_confirm=True, user_metadata=None):
        if any(u["email"] == email for u in self.users):
            raise AuthProviderError("A user with this email address has already been registered", 422)
        user = {"id": f"auth-{len(self.users) + 1}", "email": email, "user_metadata": user_metadata or {}}
        self.users.append(user)
        self.created.append(email)
        return user


def make_token(user_id, email=None, audience="authenticated", secret=None, expires_in=3600):
    claims = {"sub": user_id, "aud": audience, "exp": int(time.time()) + expires_in}
    if email:
        claims["email"] = email
    return jwt.encode(claims, secret or settings.SUPABASE_JWT_SECRET, algorithm="HS256")


def auth_header(user_id, email=None):
    return {"Authorization": f"Bearer {make_token(user_id, email)}"}


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    models.Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()
        models.Base.metadata.drop_all(bind=engine)


@pytest.fixture
def auth_provider():
    return FakeAuthProvider()


@pytest.fixture
def client(db, auth_provider):
    def override_get_db():
        yield db

    app.dependency_overrides[session.get_db] = override_get_db
    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def org(db):
    """MAB organization with a CS department (BSCS program) and an EE department."""
    organization = models.Organization(id="org-1", name="MAB University", code="MAB")
    cs = models.Department(id="dept-cs", name="Computer Science", code="CS", organization_id="org-1")
    ee = models.Department(id="dept-ee", name="Electrical", code="EE", organization_id="org-1")
    bscs = models.Program(id="prog-bscs", name="BS Computer Science", code="BSCS", department_id="dept-cs")
    db.add_all([organization, cs, ee, bscs])
    db.commit()
    return organization


def add_user(db, user_id, full_name, role, organization_id="org-1", department_id=None, is_active=True):
    db.add(models.Profile(id=user_id, full_name=full_name, is_active=is_active))
    db.add(models.UserRole(
        user_id=user_id, role=role, organization_id=organization_id, department_id=department_id
    ))
    db.commit()


@pytest.fixture
def people(db, org):
    add_user(db, "admin-1", "Alice Admin", "org_admin")
    add_user(db, "pm-1", "Paul Program", "program_manager")
    add_user(db, "hod-1", "Hana Head", "hod", department_id="dept-cs")
    add_user(db, "fac-1", "Bob Faculty", "faculty", department_id="dept-cs")
    add_user(db, "fac-2", "Carol Faculty", "faculty", department_id="dept-ee")
    return {
        "admin": auth_header("admin-1", "admin@mab.com"),
        "pm": auth_header("pm-1", "pm@mab.com"),
        "hod": auth_header("hod-1", "hod@mab.com"),
        "member": auth_header("fac-1", "bob@mab.com"),
        "other_member": auth_header("fac-2", "carol@mab.com"),
    }
