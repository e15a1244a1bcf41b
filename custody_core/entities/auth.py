# custody_core/entities/auth.py

from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication

from custody_core.common.errors import Unauthorized


class CookieOrHeaderJWTAuthentication(JWTAuthentication):
    """
    Authenticate using:
      1) Authorization: Bearer <access>
      2) HttpOnly cookie containing access token
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header:
            return super().authenticate(request)

        cookie_name = settings.SIMPLE_JWT.get("AUTH_COOKIE", "custody_access")
        raw_token = request.COOKIES.get(cookie_name)
        if not raw_token:
            return None

        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token


def caller_address(request) -> str:
    """
    Address the authenticated user acts as. Users without a linked entity
    cannot call ledger operations.
    """
    user = getattr(request, "user", None)
    entity = getattr(user, "custody_entity", None) if user is not None else None
    if entity is None:
        raise Unauthorized("Authenticated user is not linked to a registered entity.")
    return entity.address
