from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import generics, permissions

from .serializers import UserSerializer


@extend_schema_view(
    get=extend_schema(summary="Get my profile"),
    patch=extend_schema(summary="Update my name or phone"),
)
class MeView(generics.RetrieveUpdateAPIView):
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ["get", "patch", "head", "options"]

    def get_object(self):
        return self.request.user
