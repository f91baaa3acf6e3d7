# clinic/utils/__init__.py

from .auth import (
    AuthContext,
    has_role,
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    verify_token,
    issue_tokens,
    get_auth_context,
    require_staff,
    require_role,
    require_admin,
)
