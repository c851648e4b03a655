# app/api/problem.py
"""
门户错误响应（Problem 形状）：

    {error_code, message, http_status, context?, details?, trace_id?}

门户会主动抛出的错误码集中登记在 PORTAL_PROBLEMS，路由 / 依赖里只写错误码，
状态码和默认文案从这里取，前端据 error_code 分支。
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple, TypedDict

from fastapi import HTTPException

ProblemType = Literal["validation", "state", "auth"]


class ProblemDetail(TypedDict, total=False):
    type: ProblemType
    path: str
    reason: str
    order_id: str


@dataclass(frozen=True)
class Problem:
    error_code: str
    message: str
    http_status: int
    context: Dict[str, Any] = field(default_factory=dict)
    details: List[ProblemDetail] = field(default_factory=list)
    trace_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "error_code": self.error_code,
            "message": self.message,
            "http_status": self.http_status,
        }
        # 空的可选段不输出，响应体保持紧凑
        if self.context:
            out["context"] = dict(self.context)
        if self.details:
            out["details"] = list(self.details)
        if self.trace_id:
            out["trace_id"] = self.trace_id
        return out


# error_code → (http_status, 默认文案)
PORTAL_PROBLEMS: Dict[str, Tuple[int, str]] = {
    "customer_required": (401, "未识别客户身份"),
    "order_not_found": (404, "订单不存在"),
    "invalid_stage": (422, "未知的生命周期阶段"),
    "request_validation_error": (422, "请求参数不合法"),
    "internal_error": (500, "服务器内部错误"),
}


def make_problem(
    *,
    status_code: int,
    error_code: str,
    message: str,
    context: Optional[Dict[str, Any]] = None,
    details: Optional[Sequence[ProblemDetail]] = None,
    trace_id: Optional[str] = None,
) -> Dict[str, Any]:
    return Problem(
        error_code=str(error_code),
        message=str(message),
        http_status=int(status_code),
        context=dict(context or {}),
        details=list(details or ()),
        trace_id=trace_id,
    ).to_dict()


def known_problem(
    error_code: str,
    message: Optional[str] = None,
    *,
    context: Optional[Dict[str, Any]] = None,
    details: Optional[Sequence[ProblemDetail]] = None,
    trace_id: Optional[str] = None,
) -> Dict[str, Any]:
    """按登记表组装 Problem；未登记的错误码是编程错误，直接 KeyError。"""
    status_code, default_message = PORTAL_PROBLEMS[error_code]
    return make_problem(
        status_code=status_code,
        error_code=error_code,
        message=message or default_message,
        context=context,
        details=details,
        trace_id=trace_id,
    )


def raise_problem(
    error_code: str,
    message: Optional[str] = None,
    *,
    details: Optional[Sequence[ProblemDetail]] = None,
) -> None:
    body = known_problem(error_code, message, details=details)
    raise HTTPException(status_code=body["http_status"], detail=body)
