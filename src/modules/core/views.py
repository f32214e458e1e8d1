from typing import Any, Dict

import structlog
from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

from modules.core.mongo import connection_status

logger = structlog.get_logger()


def health_check(request: HttpRequest) -> JsonResponse:
    services: Dict[str, Dict[str, Any]] = {"database": connection_status()}
    overall_healthy = all(s["status"] == "up" for s in services.values())

    if not overall_healthy:
        logger.error("health_check_db_failure")

    status_code = 200 if overall_healthy else 503

    logger.info(
        "health_check_completed", status="healthy" if overall_healthy else "unhealthy"
    )

    return JsonResponse(
        {
            "status": "healthy" if overall_healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "environment": settings.APP_ENV,
            "services": services,
        },
        status=status_code,
    )


def api_info(request: HttpRequest) -> JsonResponse:
    """Describe the API: endpoints, product categories, barcode formats."""
    return JsonResponse(
        {
            "success": True,
            "message": f"{settings.API_TITLE} is running",
            "version": settings.API_VERSION,
            "endpoints": {
                "health": "/health",
                "products": "/api/products",
                "docs": "/api/docs/",
            },
            "productCategories": list(settings.PRODUCT_CATEGORIES),
            "barcodeFormats": list(settings.BARCODE_FORMATS),
        }
    )
