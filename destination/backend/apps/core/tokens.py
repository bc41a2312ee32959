from datetime import timedelta

from django.conf import settings
from rest_framework_simplejwt.tokens import RefreshToken


def issue_tokens(user, remember_me=False):
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    refresh['email'] = user.email
    refresh['name'] = user.display_name
    access = refresh.access_token
    if remember_me:
        lifetime = timedelta(days=settings.JWT_REMEMBER_DAYS)
        access.set_exp(lifetime=lifetime)
        refresh.set_exp(lifetime=lifetime)
    return {'access': str(access), 'refresh': str(refresh)}


def set_auth_cookie(response, access, remember_me=False):
    days = settings.JWT_REMEMBER_DAYS if remember_me else settings.JWT_ACCESS_DAYS
    response.set_cookie(
        settings.AUTH_COOKIE_NAME, access,
        max_age=int(timedelta(days=days).total_seconds()),
        httponly=True, secure=settings.AUTH_COOKIE_SECURE, samesite='Lax', path='/',
    )
    return response


def clear_auth_cookie(response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path='/')
    return response
