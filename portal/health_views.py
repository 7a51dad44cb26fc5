from django.conf import settings
from django.db import connection
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods


@csrf_exempt
@require_http_methods(["GET"])
def health_check(request):
    """Simple health check endpoint for deployment verification"""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        database = 'ok'
    except Exception as e:
        database = f'error: {e}'

    healthy = database == 'ok'
    return JsonResponse({
        'status': 'healthy' if healthy else 'degraded',
        'database': database,
        'version': settings.SYSTEM_INFO['version'],
        'environment': settings.SYSTEM_INFO['environment'],
        'features': settings.FEATURES,
    }, status=200 if healthy else 503)
