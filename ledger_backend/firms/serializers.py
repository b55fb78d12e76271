# firms/serializers.py

from rest_framework import serializers

from firms.models import Firm


class FirmSerializer(serializers.ModelSerializer):
    class Meta:
        model = Firm
        fields = [
            "id",
            "name",
            "address",
            "phone",
            "email",
            "gst_number",
            "status",
            "created_at",
        ]
        read_only_fields = fields
