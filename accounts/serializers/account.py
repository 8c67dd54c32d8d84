from rest_framework import serializers

from accounts.models import AuditEntry


class AccountListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=['all', 'active', 'inactive'], required=False)
    q = serializers.CharField(required=False, allow_blank=True, max_length=64)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)


class DeactivateSerializer(serializers.Serializer):
    reasonCode = serializers.CharField(max_length=64)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2000)


class AuditQuerySerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=[c for c, _ in AuditEntry.ACTION_CHOICES], required=False)
    since = serializers.DateTimeField(required=False)
    until = serializers.DateTimeField(required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=500)

    def validate(self, attrs):
        since, until = attrs.get('since'), attrs.get('until')
        if since and until and since > until:
            raise serializers.ValidationError({'since': 'since must not be after until'})
        return attrs
