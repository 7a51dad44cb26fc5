"""
API views for the audit trail
"""
from datetime import timedelta

from django.db.models import Q
from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.response import Response

from .models import AuditLog


@api_view(['GET'])
def get_audit_logs(request):
    """
    Get audit logs with filtering and pagination

    Query parameters:
    - action: Filter by action type
    - entity_type: Filter by entity type
    - entity_id: Filter by entity ID
    - search: Match entity name, description or actor email
    - days: Number of days to look back (default: 30, 0 for all)
    - limit: Number of results to return (default: 100, max: 500)
    - offset: Pagination offset (default: 0)
    """
    if not request.user.is_admin():
        raise PermissionDenied('Admin access required')

    try:
        days = int(request.query_params.get('days', 30))
        limit = min(int(request.query_params.get('limit', 100)), 500)
        offset = int(request.query_params.get('offset', 0))
    except ValueError:
        raise ValidationError({'detail': 'days, limit and offset must be integers'})

    queryset = AuditLog.objects.select_related('actor')

    if days > 0:
        queryset = queryset.filter(created_at__gte=timezone.now() - timedelta(days=days))

    for field in ('action', 'entity_type', 'entity_id'):
        value = request.query_params.get(field)
        if value:
            queryset = queryset.filter(**{field: value})

    search = request.query_params.get('search')
    if search:
        queryset = queryset.filter(
            Q(entity_name__icontains=search) |
            Q(description__icontains=search) |
            Q(actor_email__icontains=search)
        )

    total_count = queryset.count()
    logs = queryset[offset:offset + limit]

    log_data = [
        {
            'id': log.id,
            'actor': {
                'id': log.actor_id,
                'email': log.actor_email
            },
            'action': log.action,
            'entity_type': log.entity_type,
            'entity_id': log.entity_id,
            'entity_name': log.entity_name,
            'description': log.description,
            'changes': log.changes,
            'created_at': log.created_at.isoformat()
        }
        for log in logs
    ]

    return Response({
        'success': True,
        'data': log_data,
        'pagination': {
            'total': total_count,
            'limit': limit,
            'offset': offset,
            'returned': len(log_data)
        }
    })
