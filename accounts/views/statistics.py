from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdminRole
from accounts.services.statistics import compute_statistics


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def statistics(request):
    # never cached: every call reflects the committed state
    return Response({'ok': True, 'data': compute_statistics()})
