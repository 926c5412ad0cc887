import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bridgepath.core.permissions import IsStaffRole
from bridgepath.core.roles import ADMIN, get_original_role, visible
from bridgepath.core.utils import create_audit_log

from .filters import ProductionRecordFilter
from .models import ProductionRecord
from .serializers import ProductionRecordSerializer

logger = logging.getLogger('bridgepath.production')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def production_record_list_create(request):
    """List production or record processed material"""
    if request.method == 'GET':
        queryset = visible(ProductionRecord.objects.all(), request)
        filterset = ProductionRecordFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        records = filterset.qs.order_by('-production_date', '-created_at')
        return Response({'ok': True, 'production_records': ProductionRecordSerializer(records, many=True).data})

    serializer = ProductionRecordSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    record = serializer.save()
    create_audit_log(request=request, action='create', model_name='ProductionRecord', object_id=record.pk,
                     object_name=str(record), changes={'value': str(record.value)})
    if record.value == 0:
        logger.warning(f"No price for {record.material_category} / {record.material_type}; record {record.pk} valued at 0")
    return Response({'ok': True, 'id': record.pk, 'value': float(record.value)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def production_record_detail(request, pk):
    """Retrieve, correct or remove a production record"""
    record = get_object_or_404(ProductionRecord, pk=pk)

    if request.method == 'GET':
        return Response({'ok': True, 'production_record': ProductionRecordSerializer(record).data})

    if request.method == 'PATCH':
        serializer = ProductionRecordSerializer(record, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        create_audit_log(request=request, action='update', model_name='ProductionRecord', object_id=record.pk,
                         object_name=str(record), changes=dict(request.data))
        return Response({'ok': True, 'value': float(record.value)})

    if get_original_role(request.user) != ADMIN:
        return Response({'ok': False, 'error': 'Unauthorized'}, status=status.HTTP_403_FORBIDDEN)

    name = str(record)
    record.delete()
    create_audit_log(request=request, action='delete', model_name='ProductionRecord', object_id=pk, object_name=name)
    return Response({'ok': True})
