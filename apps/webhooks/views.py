from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.webhooks.handlers import StripeWebhookHandler
from apps.webhooks.permissions import HasValidStripeSignature
from apps.webhooks.services import StripeWebhookError


@extend_schema(exclude=True)
class StripeWebhookView(APIView):
    authentication_classes = []
    permission_classes = [HasValidStripeSignature]

    def post(self, request):
        try:
            webhook_event = StripeWebhookHandler(request).handle_event()
        except StripeWebhookError as e:
            return Response({"received": False, "error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"received": True, "status": webhook_event.status}, status=status.HTTP_200_OK)
