"""
DualAuth - Access-Control Gate Tests

Role guards for both strategies, bearer header parsing, and the
guard dependencies exercised directly.

Run with: pytest tests/test_rbac.py
"""

import pytest
from datetime import timedelta
from uuid import uuid4

from dualauth.auth.dependencies import _check_role, _role_set, require_token
from dualauth.auth.errors import Forbidden, Unauthenticated
from dualauth.auth.models import Role
from dualauth.auth.service import AuthStrategy, Principal
from dualauth.auth.tokens import create_access_token, create_refresh_token
from fastapi.security import HTTPAuthorizationCredentials
from tests.conftest import SESSION_API, TOKEN_API, bearer, login


class TestRoleCheck:
    """Unit tests for the shared role-membership check."""
    
    def test_allowed_role_passes(self):
        principal = Principal(user_id=uuid4(), role=Role.ADMIN, strategy=AuthStrategy.TOKEN)
        
        assert _check_role(principal, {Role.ADMIN}) is principal
    
    def test_other_role_forbidden(self):
        principal = Principal(user_id=uuid4(), role=Role.USER, strategy=AuthStrategy.SESSION)
        
        with pytest.raises(Forbidden):
            _check_role(principal, {Role.ADMIN})
    
    def test_missing_role_unauthenticated(self):
        principal = Principal(user_id=uuid4(), strategy=AuthStrategy.TOKEN)
        
        with pytest.raises(Unauthenticated):
            _check_role(principal, {Role.ADMIN})
    
    def test_role_set_accepts_strings(self):
        assert _role_set(["admin", Role.USER]) == {Role.ADMIN, Role.USER}
    
    def test_role_set_must_not_be_empty(self):
        with pytest.raises(ValueError):
            _role_set([])


class TestTokenGuard:
    """Direct tests of the bearer dependency."""
    
    @pytest.mark.asyncio
    async def test_valid_token_attaches_claims(self):
        user_id = uuid4()
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=create_access_token(user_id, "admin")
        )
        
        principal = await require_token(credentials)
        
        assert principal.user_id == user_id
        assert principal.role is Role.ADMIN
        assert principal.strategy is AuthStrategy.TOKEN
        assert principal.token_id
    
    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        with pytest.raises(Unauthenticated) as exc_info:
            await require_token(None)
        
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}
    
    @pytest.mark.asyncio
    async def test_non_uuid_subject_rejected(self):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=create_access_token("not-a-uuid", "user")
        )
        
        with pytest.raises(Unauthenticated):
            await require_token(credentials)


class TestTokenGuardEndpoints:
    """Bearer parsing through the HTTP surface."""
    
    def test_missing_header(self, client):
        response = client.get(f"{TOKEN_API}/profile")
        
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
    
    def test_wrong_scheme(self, client, test_user):
        token = create_access_token(test_user["id"], "user")
        
        response = client.get(f"{TOKEN_API}/profile", headers={"Authorization": f"Token {token}"})
        
        assert response.status_code == 401
    
    def test_bearer_without_token(self, client):
        response = client.get(f"{TOKEN_API}/profile", headers={"Authorization": "Bearer "})
        
        assert response.status_code == 401
    
    def test_invalid_token(self, client):
        response = client.get(f"{TOKEN_API}/profile", headers=bearer("totally.invalid.token"))
        
        assert response.status_code == 401
        assert response.json()["code"] == "unauthenticated"
    
    def test_expired_token(self, client, test_user):
        token = create_access_token(test_user["id"], "user", expires_delta=timedelta(seconds=-5))
        
        response = client.get(f"{TOKEN_API}/profile", headers=bearer(token))
        
        assert response.status_code == 401
    
    def test_refresh_token_is_not_a_bearer_token(self, client, test_user):
        response = client.get(
            f"{TOKEN_API}/profile", headers=bearer(create_refresh_token(test_user["id"]))
        )
        
        assert response.status_code == 401


class TestAdminRoutes:
    """Role guards on the admin probes."""
    
    def test_session_admin_allowed(self, client, test_admin):
        login(client, SESSION_API, "admin@test.com", "adminpass")
        
        response = client.get(f"{SESSION_API}/admin")
        
        assert response.status_code == 200
        assert response.json()["success"] is True
    
    def test_session_user_forbidden(self, client, test_user):
        login(client, SESSION_API, "alice@test.com", "secret1")
        
        response = client.get(f"{SESSION_API}/admin")
        
        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"
    
    def test_session_anonymous_unauthenticated(self, client):
        assert client.get(f"{SESSION_API}/admin").status_code == 401
    
    def test_token_admin_allowed(self, client, test_admin):
        access_token = login(client, TOKEN_API, "admin@test.com", "adminpass").json()["accessToken"]
        
        response = client.get(f"{TOKEN_API}/admin", headers=bearer(access_token))
        
        assert response.status_code == 200
    
    def test_token_user_forbidden(self, client, test_user):
        access_token = login(client, TOKEN_API, "alice@test.com", "secret1").json()["accessToken"]
        
        response = client.get(f"{TOKEN_API}/admin", headers=bearer(access_token))
        
        assert response.status_code == 403
    
    def test_token_anonymous_unauthenticated(self, client):
        assert client.get(f"{TOKEN_API}/admin").status_code == 401
    
    def test_registration_never_grants_admin(self, client):
        response = client.post(
            f"{TOKEN_API}/register",
            json={"username": "mallory", "email": "m@x.com", "password": "secret1", "role": "admin"},
        )
        
        assert response.status_code == 201
        assert response.json()["data"]["role"] == "user"
        assert client.get(
            f"{TOKEN_API}/admin", headers=bearer(response.json()["accessToken"])
        ).status_code == 403
