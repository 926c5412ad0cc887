import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bridgepath.core.roles import ADMIN, get_original_role
from bridgepath.core.utils import create_audit_log

from .models import MaterialPrice
from .serializers import MaterialPriceSerializer

logger = logging.getLogger('bridgepath.pricing')


def admin_only_response():
    return Response({'ok': False, 'error': 'Unauthorized'}, status=status.HTTP_403_FORBIDDEN)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def material_price_list_create(request):
    """Price sheet; any signed-in user may read, admins maintain it"""
    if request.method == 'GET':
        prices = MaterialPrice.objects.order_by('category', 'material_type', 'id')
        return Response({'ok': True, 'prices': MaterialPriceSerializer(prices, many=True).data})

    if get_original_role(request.user) != ADMIN:
        return admin_only_response()

    serializer = MaterialPriceSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    price = serializer.save()
    create_audit_log(request=request, action='create', model_name='MaterialPrice', object_id=price.pk,
                     object_name=str(price))
    logger.info(f"Material price {price.pk} created: {price.category} / {price.material_type}")
    return Response({'ok': True, 'id': price.pk}, status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def material_price_detail(request, pk):
    """Update or remove a price"""
    if get_original_role(request.user) != ADMIN:
        return admin_only_response()

    price = get_object_or_404(MaterialPrice, pk=pk)

    if request.method == 'PATCH':
        serializer = MaterialPriceSerializer(price, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        create_audit_log(request=request, action='update', model_name='MaterialPrice', object_id=price.pk,
                         object_name=str(price), changes=dict(request.data))
        return Response({'ok': True})

    name = str(price)
    price.delete()
    create_audit_log(request=request, action='delete', model_name='MaterialPrice', object_id=pk, object_name=name)
    return Response({'ok': True})
