import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bridgepath.core.permissions import IsStaffRole
from bridgepath.core.roles import ADMIN, get_original_role
from bridgepath.core.utils import create_audit_log

from .filters import AlertFilter
from .models import Alert
from .serializers import AlertSerializer, AlertUpdateSerializer

logger = logging.getLogger('bridgepath.alerts')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def alert_list_create(request):
    """List alerts newest first, or raise one (admin)"""
    if request.method == 'GET':
        filterset = AlertFilter(request.query_params, queryset=Alert.objects.all())
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        alerts = filterset.qs.order_by('-created_at')
        return Response({'ok': True, 'alerts': AlertSerializer(alerts, many=True).data})

    if get_original_role(request.user) != ADMIN:
        return Response({'ok': False, 'error': 'Unauthorized'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AlertSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    alert = serializer.save()
    create_audit_log(request=request, action='create', model_name='Alert', object_id=alert.pk,
                     object_name=str(alert))
    if alert.priority == 'high':
        logger.warning(f"High priority alert raised: {alert.message}")
    return Response({'ok': True, 'id': alert.pk}, status=status.HTTP_201_CREATED)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsStaffRole])
def alert_update(request, pk):
    """Mark an alert read or dismissed"""
    alert = get_object_or_404(Alert, pk=pk)

    serializer = AlertUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    update_fields = ['updated_at']
    for field, value in serializer.validated_data.items():
        setattr(alert, field, value)
        update_fields.append(field)
    alert.save(update_fields=update_fields)
    return Response({'ok': True})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def alert_unread_count(request):
    count = Alert.objects.filter(is_read=False, is_dismissed=False).count()
    return Response({'ok': True, 'count': count})
