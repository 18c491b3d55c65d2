"""
Health check endpoint for load balancers and monitoring.
"""
import redis
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django.db import connection
from django.conf import settings

from core.services.fcm_service import FCMService


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
    - 200 OK if the database answers
    - 503 Service Unavailable otherwise

    The Celery broker and the push gateway are reported but never mark the
    service unhealthy: scheduled jobs and pushes degrade, the API does not.
    """
    health = {
        'status': 'healthy',
        'checks': {}
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        health['checks']['database'] = 'ok'
    except Exception as e:
        health['status'] = 'unhealthy'
        health['checks']['database'] = f'error: {str(e)}'

    broker_url = getattr(settings, 'CELERY_BROKER_URL', None)
    if broker_url and broker_url.startswith('redis'):
        try:
            redis.from_url(broker_url).ping()
            health['checks']['broker'] = 'ok'
        except Exception as e:
            health['checks']['broker'] = f'warning: {str(e)}'
    else:
        health['checks']['broker'] = 'not_configured'

    health['checks']['push'] = 'ok' if FCMService._initialized else 'not_initialized'

    status_code = 200 if health['status'] == 'healthy' else 503
    return Response(health, status=status_code)
