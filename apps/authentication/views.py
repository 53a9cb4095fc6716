from drf_spectacular.utils import extend_schema
from rest_framework.generics import CreateAPIView
from rest_framework.permissions import AllowAny
from rest_framework_simplejwt.views import TokenBlacklistView, TokenObtainPairView, TokenRefreshView

from apps.authentication.serializers import RegisterSerializer, TokenWithRoleObtainPairSerializer


@extend_schema(summary="Register a customer account", tags=["auth"])
class RegisterView(CreateAPIView):
    serializer_class = RegisterSerializer
    permission_classes = [AllowAny]
    authentication_classes = []


@extend_schema(summary="Obtain an access/refresh token pair", tags=["auth"])
class LoginView(TokenObtainPairView):
    serializer_class = TokenWithRoleObtainPairSerializer


@extend_schema(summary="Refresh an access token", tags=["auth"])
class RefreshView(TokenRefreshView):
    pass


@extend_schema(summary="Blacklist a refresh token", tags=["auth"])
class LogoutView(TokenBlacklistView):
    pass
