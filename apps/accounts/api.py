# apps/accounts/api.py
from typing import Any, Dict

from django.shortcuts import get_object_or_404

from rest_framework import serializers
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import extend_schema

from apps.rbac.permissions import roles_required
from apps.rbac.utils import user_role
from .models import Profile
from .serializers import ProfileSerializer, ProfileSummarySerializer


class WhoAmISerializer(serializers.Serializer):
    is_authenticated = serializers.BooleanField()
    user_id = serializers.IntegerField(required=False)
    username = serializers.CharField(required=False)
    email = serializers.EmailField(required=False)
    display_name = serializers.CharField(required=False, allow_blank=True)
    role = serializers.CharField(required=False, allow_null=True)


@extend_schema(
    summary="Who am I",
    description=(
        "I return current user info and the marketplace role from the profile. "
        "If anonymous, I return `is_authenticated=false`."
    ),
    responses={200: WhoAmISerializer},
)
class WhoAmIView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        if not request.user.is_authenticated:
            return Response({"is_authenticated": False})

        profile = Profile.objects.filter(user=request.user).first()
        payload: Dict[str, Any] = {
            "is_authenticated": True,
            "user_id": request.user.id,
            "username": request.user.get_username(),
            "email": getattr(request.user, "email", ""),
            "display_name": profile.display_name if profile else str(request.user),
            "role": user_role(request.user),
        }
        return Response(payload)


@extend_schema(
    summary="Get a marketplace profile",
    description="I return the public summary (id, full_name, role) for a user. 404 if there is no profile.",
    responses={200: ProfileSummarySerializer},
)
class ProfileDetailView(APIView):
    permission_classes = [IsAuthenticated, roles_required("farmer", "laborer")]

    def get(self, request, user_id: int):
        profile = get_object_or_404(Profile.objects.select_related("user"), user_id=user_id)
        return Response(ProfileSummarySerializer(profile).data)


@extend_schema(
    summary="My marketplace profile",
    description=(
        "I return or update the caller's own profile. Picking a role here is what "
        "lets a new account start conversations; skills are checked against that role."
    ),
    request=ProfileSerializer,
    responses={200: ProfileSerializer},
)
class MyProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def _profile(self, request) -> Profile:
        profile, _ = Profile.objects.get_or_create(user=request.user)
        return profile

    def get(self, request):
        return Response(ProfileSerializer(self._profile(request)).data)

    def patch(self, request):
        ser = ProfileSerializer(self._profile(request), data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(ser.data)
