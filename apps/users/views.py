"""User API views."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Q  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .filters import UserFilterSet
from .permissions import IsManager
from .serializers import UserCreateSerializer, UserSerializer, UserStatusSerializer

User = get_user_model()


class UserViewSet(viewsets.ModelViewSet):
    """Account management.

    - super admins see and manage every account
    - admins see and manage their own receptionists
    - everybody can read and edit their own profile through `me`
    """

    queryset = User.objects.select_related("admin").order_by("id")
    filterset_class = UserFilterSet
    http_method_names = ["get", "post", "put", "patch", "head", "options"]

    def get_permissions(self):  # type: ignore
        if self.action in {"list", "create", "change_status"}:
            return [IsManager()]
        return [permissions.IsAuthenticated()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return UserCreateSerializer
        return UserSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if user.is_admin():
            qs = qs.filter(Q(admin=user) | Q(pk=user.pk))
        elif not user.is_super_admin():
            qs = qs.filter(pk=user.pk)
        return qs

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):  # type: ignore
        target = self.get_object()
        if target.pk == request.user.pk:
            return Response({"detail": "You cannot change your own status."}, status=status.HTTP_400_BAD_REQUEST)
        serializer = UserStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target.status = serializer.validated_data["status"]
        target.save(update_fields=["status", "updated_at"])
        return Response(UserSerializer(target).data)

    @action(detail=False, methods=["get", "patch"])
    def me(self, request):  # type: ignore
        if request.method == "GET":
            return Response(UserSerializer(request.user).data)
        serializer = UserSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
