from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.catalogs import CATALOGS, get_catalog_provider
from accounts.exceptions import ValidationError


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def catalogs(request):
    """Reference catalogs for the dashboard forms.

    ``?catalog=<name>`` narrows the response to one catalog.
    """
    wanted = request.query_params.get('catalog')
    if wanted and wanted not in CATALOGS:
        raise ValidationError({'catalog': [f'unknown catalog: {wanted}']})
    provider = get_catalog_provider()
    names = [wanted] if wanted else list(CATALOGS)
    return Response({
        'ok': True,
        'version': provider.version,
        'data': {name: provider.entries(name) for name in names},
    })
