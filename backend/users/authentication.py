from rest_framework_simplejwt.authentication import JWTAuthentication
from django.conf import settings


class BearerOrCookieJWTAuthentication(JWTAuthentication):
    """
    Standard `Authorization: Bearer <access>` authentication, falling back to
    the access-token cookie for browser clients that keep the token there.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            return super().authenticate(request)

        access_token = request.COOKIES.get(settings.SIMPLE_JWT["AUTH_COOKIE"])
        if not access_token:
            return None

        validated_token = self.get_validated_token(access_token)
        return self.get_user(validated_token), validated_token
