"""Views for authentication flows (register, login, token refresh)."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.permissions import AllowAny  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore
from rest_framework_simplejwt.tokens import RefreshToken  # type: ignore

from .auth_serializers import LoginSerializer, RegisterSerializer
from .serializers import UserSerializer

logger = logging.getLogger(__name__)


def _tokens_for_user(user) -> dict[str, str]:
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


def _session_payload(user) -> dict:
    return {"user": UserSerializer(user).data, "tokens": _tokens_for_user(user)}


class RegisterView(APIView):
    """Sign up as an ordinary user; the response carries a token pair."""

    permission_classes = [AllowAny]

    def post(self, request):  # type: ignore
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s registered", user.pk)
        return Response(_session_payload(user), status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """Log in with email or phone plus password."""

    permission_classes = [AllowAny]

    def post(self, request):  # type: ignore
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        logger.info("User %s logged in", user.pk)
        return Response(_session_payload(user), status=status.HTTP_200_OK)
