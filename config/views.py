from django.db import connection
from django.http import JsonResponse


def health_check(request):
    """Liveness probe; also checks the database connection."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        database = 'ok'
    except Exception:
        database = 'unavailable'
    return JsonResponse({
        'status': 'ok' if database == 'ok' else 'degraded',
        'database': database,
    })


def error_404(request, exception):
    return JsonResponse({'success': False, 'error': '找不到資源'}, status=404)


def error_500(request):
    """Same error shape as the action endpoint."""
    return JsonResponse({'success': False, 'error': '系統錯誤，請稍後再試'}, status=500)
