"""
Websocket authentication for the realtime socket.

Sockets present the same access token the REST API accepts. The middleware
resolves it to a user and stores it in scope["user"]; an unusable token leaves
the socket anonymous and RealtimeConsumer closes it with code 4001.
"""
import logging
from http.cookies import SimpleCookie
from urllib.parse import parse_qs

import jwt
from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.conf import settings
from django.contrib.auth.models import AnonymousUser

logger = logging.getLogger(__name__)


def token_from_scope(scope):
    """
    First token found in the `?token=` query parameter, a Bearer
    Authorization header, or the access-token cookie.
    """
    query = parse_qs(scope.get("query_string", b"").decode("latin-1"))
    if query.get("token"):
        return query["token"][0]

    headers = {name.lower(): value.decode("latin-1") for name, value in scope.get("headers", [])}
    scheme, _, credentials = headers.get(b"authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    cookie = SimpleCookie()
    cookie.load(headers.get(b"cookie", ""))
    morsel = cookie.get(settings.SIMPLE_JWT["AUTH_COOKIE"])
    return morsel.value if morsel else None


def decode_access_token(token):
    """Verified claims of an access token, or None."""
    config = settings.SIMPLE_JWT
    try:
        claims = jwt.decode(
            token,
            config.get("SIGNING_KEY") or settings.SECRET_KEY,
            algorithms=[config.get("ALGORITHM", "HS256")],
        )
    except jwt.ExpiredSignatureError:
        logger.info("Websocket presented an expired token")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Websocket presented an invalid token: {e}")
        return None

    if claims.get("token_type", "access") != "access":
        logger.warning("Websocket presented a refresh token")
        return None
    return claims


@database_sync_to_async
def get_active_user(user_id):
    from users.models import User

    try:
        return User.objects.get(id=user_id, is_active=True)
    except (User.DoesNotExist, ValueError):
        logger.warning(f"Websocket token names unknown user {user_id}")
        return AnonymousUser()


class JWTAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        if scope["type"] == "websocket":
            scope["user"] = await self.authenticate(scope)
        return await super().__call__(scope, receive, send)

    async def authenticate(self, scope):
        token = token_from_scope(scope)
        if not token:
            return AnonymousUser()

        claims = decode_access_token(token)
        user_id = claims.get(settings.SIMPLE_JWT.get("USER_ID_CLAIM", "user_id")) if claims else None
        if not user_id:
            return AnonymousUser()

        user = await get_active_user(user_id)
        if user.is_authenticated:
            logger.debug(f"Websocket authenticated as {user.id} ({user.role})")
        return user
