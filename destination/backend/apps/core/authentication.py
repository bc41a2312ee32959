from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, AuthenticationFailed
import structlog

logger = structlog.get_logger(__name__)


class CookieJWTAuthentication(JWTAuthentication):
    """Bearer header first, then the auth cookie set at login.

    A bad Bearer header is a 401. A stale or broken cookie is ignored so public
    endpoints keep answering anonymously.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            raw_token = self.get_raw_token(header)
            if raw_token is None:
                return None
            return self._active(*self._resolve(raw_token))
        raw_token = request.COOKIES.get(settings.AUTH_COOKIE_NAME)
        if not raw_token:
            return None
        try:
            user, validated_token = self._resolve(raw_token.encode())
        except (InvalidToken, AuthenticationFailed) as e:
            logger.debug('auth cookie ignored', error=str(e))
            return None
        return self._active(user, validated_token)

    def _resolve(self, raw_token):
        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token

    def _active(self, user, validated_token):
        if getattr(user, 'status', 'active') != 'active':
            return None
        return user, validated_token
