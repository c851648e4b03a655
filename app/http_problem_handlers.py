# app/http_problem_handlers.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.problem import known_problem, make_problem

logger = logging.getLogger("portal")


def _new_trace_id() -> str:
    return f"t_{uuid.uuid4().hex[:12]}"


def _request_context(req: Request) -> Dict[str, Any]:
    return {"path": getattr(req.url, "path", ""), "method": req.method}


def _validation_details(errors: Iterable[Any]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for i, e in enumerate(errors):
        if not isinstance(e, dict):
            out.append({"type": "validation", "path": f"validation[{i}]", "reason": str(e)})
            continue
        # loc 形如 ("query", "months")，拼成 query.months 方便前端定位
        loc = ".".join(str(x) for x in (e.get("loc") or ()))
        out.append(
            {
                "type": "validation",
                "path": loc or f"validation[{i}]",
                "reason": str(e.get("msg") or e.get("type") or "invalid"),
            }
        )
    return out


def _from_http_exception(req: Request, exc: HTTPException) -> Dict[str, Any]:
    ctx = _request_context(req)
    d = exc.detail

    # raise_problem 产出：只补 trace_id / 请求上下文
    if isinstance(d, dict) and "error_code" in d:
        out = dict(d)
        out["http_status"] = int(exc.status_code)
        out.setdefault("trace_id", _new_trace_id())
        out["context"] = {**ctx, **(out.get("context") or {})}
        return out

    msg = str(d) if d else "请求被拒绝"
    return make_problem(
        status_code=int(exc.status_code),
        error_code="http_error",
        message=msg,
        context=ctx,
        details=[{"type": "state", "reason": msg}],
        trace_id=_new_trace_id(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _validation_error(req: Request, exc: RequestValidationError):
        content = known_problem(
            "request_validation_error",
            context=_request_context(req),
            details=_validation_details(exc.errors()),
            trace_id=_new_trace_id(),
        )
        return JSONResponse(status_code=422, content=content)

    @app.exception_handler(HTTPException)
    async def _http_error(req: Request, exc: HTTPException):
        return JSONResponse(status_code=int(exc.status_code), content=_from_http_exception(req, exc))

    @app.exception_handler(Exception)
    async def _unhandled(req: Request, exc: Exception):
        trace_id = _new_trace_id()
        logger.exception("UNHANDLED_EXC[%s] %s %s: %s", trace_id, req.method, req.url.path, exc)
        content = known_problem("internal_error", context=_request_context(req), trace_id=trace_id)
        return JSONResponse(status_code=500, content=content)
