import logging

from rest_framework import generics

from .models import StoreSettings
from .serializers import StoreSettingsSerializer

logger = logging.getLogger(__name__)


class StoreSettingsView(generics.RetrieveUpdateAPIView):
    """GET / PUT / PATCH the store settings singleton"""

    serializer_class = StoreSettingsSerializer

    def get_object(self):
        return StoreSettings.load()

    def perform_update(self, serializer):
        instance = serializer.save()
        logger.info(
            f"[SETTINGS UPDATED] Store: {instance.store_name} | "
            f"Tax: {instance.tax_percentage}% | "
            f"Low stock threshold: {instance.low_stock_threshold} | "
            f"User: {self.request.user.username}"
        )
