import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bridgepath.core.permissions import IsStaffRole
from bridgepath.core.roles import ADMIN, get_original_role, visible
from bridgepath.core.utils import create_audit_log

from .filters import WorkLogFilter
from .models import WorkLog
from .serializers import WorkLogSerializer

logger = logging.getLogger('bridgepath.worklogs')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def work_log_list_create(request):
    """List work logs or record a shift"""
    if request.method == 'GET':
        queryset = visible(WorkLog.objects.all(), request)
        filterset = WorkLogFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        work_logs = filterset.qs.order_by('-work_date', '-created_at')
        return Response({'ok': True, 'work_logs': WorkLogSerializer(work_logs, many=True).data})

    serializer = WorkLogSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    work_log = serializer.save()
    create_audit_log(request=request, action='create', model_name='WorkLog', object_id=work_log.pk,
                     object_name=str(work_log))
    return Response({'ok': True, 'id': work_log.pk}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def work_log_detail(request, pk):
    """Retrieve, correct or remove a work log"""
    work_log = get_object_or_404(WorkLog, pk=pk)

    if request.method == 'GET':
        return Response({'ok': True, 'work_log': WorkLogSerializer(work_log).data})

    if request.method == 'PATCH':
        serializer = WorkLogSerializer(work_log, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        create_audit_log(request=request, action='update', model_name='WorkLog', object_id=work_log.pk,
                         object_name=str(work_log), changes=dict(request.data))
        return Response({'ok': True})

    if get_original_role(request.user) != ADMIN:
        return Response({'ok': False, 'error': 'Unauthorized'}, status=status.HTTP_403_FORBIDDEN)

    name = str(work_log)
    work_log.delete()
    create_audit_log(request=request, action='delete', model_name='WorkLog', object_id=pk, object_name=name)
    return Response({'ok': True})
