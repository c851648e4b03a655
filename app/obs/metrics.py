# app/obs/metrics.py
import os
import time

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    multiprocess,
)
from starlette.middleware.base import BaseHTTPMiddleware

http_requests_total = Counter("http_requests_total", "HTTP requests", ["method", "path", "code"])
http_request_duration = Histogram(
    "http_request_duration_seconds", "HTTP request duration seconds", ["method", "path"]
)

# 读库不可达、降级返回空结构的次数（op = list / detail / tracking / stats / trend）
portal_store_degraded_total = Counter(
    "portal_store_degraded_total", "Order store reads degraded to empty results", ["op"]
)
# 上游出现的未识别状态字（按字段）
portal_unrecognized_status_total = Counter(
    "portal_unrecognized_status_total", "Unrecognized raw status words seen", ["field"]
)
portal_malformed_records_total = Counter(
    "portal_malformed_records_total", "Order records without identity"
)
portal_activity_total = Counter("portal_activity_total", "Customer portal activity", ["action"])


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        route = request.scope.get("route")
        # 用路由模板做标签，避免 /orders/{id} 打爆基数
        path = getattr(route, "path", request.url.path)
        http_requests_total.labels(request.method, path, str(response.status_code)).inc()
        http_request_duration.labels(request.method, path).observe(elapsed)
        return response


metrics_router = APIRouter(tags=["ops"])


@metrics_router.get("/metrics", include_in_schema=False)
def export_metrics() -> Response:
    # gunicorn 多 worker：PROMETHEUS_MULTIPROC_DIR 下各分片合并后导出
    if os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
