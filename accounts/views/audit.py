from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdminRole
from accounts.serializers.account import AuditQuerySerializer
from accounts.services.audit import list_entries, format_entry


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_logs(request):
    """Audit trail, most recent first; filters only narrow the result."""
    q = AuditQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    entries = list_entries(
        action_code=q.validated_data.get('action'),
        since=q.validated_data.get('since'),
        until=q.validated_data.get('until'),
        limit=q.validated_data.get('limit'),
    )
    return Response({'ok': True, 'data': [format_entry(e) for e in entries]})
