# app/services/order_stage_rules.py
"""
生命周期判定规则表（唯一真相）。

同一张 STAGE_RULES 表同时编译成：
- 进程内判定：match_rule / classify（见 order_classifier）
- SQL 谓词：stage_predicate / completed_predicate（列表筛选、统计计数）
- SQL CASE：stage_case（按阶段 GROUP BY）

规则自上而下求值，先命中者胜；最后一条是兜底（无条件）。
SQL 侧每一列都先 COALESCE(col, '')，保证 NOT 不会遇到 NULL；
去空白 / 大小写折叠按方言编译（strip_status_ws / ascii_lower），与 normalize_raw_status 逐字符一致。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional, Tuple, Type

from sqlalchemy import (
    ColumnElement,
    String,
    and_,
    case,
    false,
    func,
    literal,
    literal_column,
    not_,
    or_,
    true,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement

from app.models.enums import (
    ASCII_LOWER,
    ASCII_UPPER,
    STATUS_WHITESPACE,
    CustomsStatus,
    DeliveryStatus,
    DocSwapStatus,
    OverallStatus,
    RawStatus,
    ShipStatus,
    normalize_raw_status,
)
from app.services.order_lifecycle_types import LifecycleStage

# 字段名 → 变体类型（字段名同时是 OrderRecord 属性名和 portal_orders 列名）
STATUS_FIELDS: Dict[str, Type[RawStatus]] = {
    "overall_status": OverallStatus,
    "ship_status": ShipStatus,
    "customs_status": CustomsStatus,
    "delivery_status": DeliveryStatus,
    "doc_swap_status": DocSwapStatus,
}


@dataclass(frozen=True)
class FieldIn:
    """条件：某字段解析后的成员 ∈ members"""

    field: str
    members: FrozenSet[RawStatus]

    @property
    def status_type(self) -> Type[RawStatus]:
        return STATUS_FIELDS[self.field]

    def spellings(self) -> FrozenSet[str]:
        kind = self.status_type
        out: set[str] = set()
        for m in self.members:
            out |= kind.spellings_of(m)
        return frozenset(out)

    def matches(self, record: Any) -> bool:
        raw = getattr(record, self.field, None)
        return self.status_type.parse(raw) in self.members


@dataclass(frozen=True)
class StageRule:
    stage: LifecycleStage
    any_of: Tuple[FieldIn, ...]  # 空 = 兜底规则

    def matches(self, record: Any) -> bool:
        if not self.any_of:
            return True
        return any(cond.matches(record) for cond in self.any_of)


def _cond(field: str, *members: RawStatus) -> FieldIn:
    kind = STATUS_FIELDS[field]
    for m in members:
        if not isinstance(m, kind):
            raise TypeError(f"{m!r} is not a {kind.__name__}")
    return FieldIn(field=field, members=frozenset(members))


# 顺序即业务优先级：终态压过一切，已送达的单子绝不会显示成“清关中”。
STAGE_RULES: Tuple[StageRule, ...] = (
    StageRule(
        LifecycleStage.DELIVERED,
        (
            _cond("delivery_status", DeliveryStatus.DELIVERED, DeliveryStatus.EXCEPTION_CLOSED),
            _cond(
                "overall_status",
                OverallStatus.COMPLETED,
                OverallStatus.ARCHIVED,
                OverallStatus.CANCELLED,
            ),
        ),
    ),
    StageRule(
        LifecycleStage.DISPATCHING,
        (_cond("delivery_status", DeliveryStatus.DISPATCHING, DeliveryStatus.PENDING_DISPATCH),),
    ),
    StageRule(
        LifecycleStage.CUSTOMS_RELEASED,
        (_cond("customs_status", CustomsStatus.RELEASED),),
    ),
    StageRule(
        LifecycleStage.CUSTOMS_IN_PROGRESS,
        (_cond("customs_status", CustomsStatus.IN_CUSTOMS, CustomsStatus.INSPECTION),),
    ),
    StageRule(
        LifecycleStage.ARRIVED,
        (_cond("ship_status", ShipStatus.ARRIVED),),
    ),
    StageRule(LifecycleStage.NOT_ARRIVED, ()),
)

_RULE_INDEX: Dict[LifecycleStage, int] = {r.stage: i for i, r in enumerate(STAGE_RULES)}


def match_rule(record: Any) -> StageRule:
    for rule in STAGE_RULES:
        if rule.matches(record):
            return rule
    # 兜底规则无条件命中，走不到这里
    return STAGE_RULES[-1]


# ---------------------------------------------------------------------------
# SQL 编译
# ---------------------------------------------------------------------------


class strip_status_ws(FunctionElement):
    """首尾去 STATUS_WHITESPACE：SQLite TRIM(x, chars) / PostgreSQL BTRIM(x, chars)"""

    type = String()
    name = "strip_status_ws"
    inherit_cache = True


class ascii_lower(FunctionElement):
    """只折叠 ASCII 大小写；PostgreSQL 的 LOWER 随 locale 折叠 Unicode，改用 TRANSLATE"""

    type = String()
    name = "ascii_lower"
    inherit_cache = True


# 常量直接内联成字符串字面量（不含引号），不走绑定参数
def _sql_str(s: str):
    return literal_column(f"'{s}'", String)


@compiles(strip_status_ws)
def _strip_status_ws(element, compiler, **kw):
    return compiler.process(func.trim(*element.clauses.clauses, _sql_str(STATUS_WHITESPACE)), **kw)


@compiles(strip_status_ws, "postgresql")
def _strip_status_ws_pg(element, compiler, **kw):
    return compiler.process(func.btrim(*element.clauses.clauses, _sql_str(STATUS_WHITESPACE)), **kw)


# SQLite 内建 LOWER 只处理 ASCII（未加载 ICU 扩展）
@compiles(ascii_lower)
def _ascii_lower(element, compiler, **kw):
    return compiler.process(func.lower(*element.clauses.clauses), **kw)


@compiles(ascii_lower, "postgresql")
def _ascii_lower_pg(element, compiler, **kw):
    return compiler.process(
        func.translate(*element.clauses.clauses, _sql_str(ASCII_UPPER), _sql_str(ASCII_LOWER)), **kw
    )


def normalized_column(col: Any) -> ColumnElement[str]:
    """normalize_raw_status 的 SQL 版：REPLACE(ascii_lower(strip_status_ws(COALESCE(col, ''))), '_', ' ')"""
    return func.replace(ascii_lower(strip_status_ws(func.coalesce(col, literal("")))), "_", " ")


def _columns_of(model: Any) -> Any:
    # 既接受 ORM 类（PortalOrder），也接受 Table / 子查询的 .c
    return getattr(model, "c", model)


def compile_condition(cond: FieldIn, model: Any) -> ColumnElement[bool]:
    col = getattr(_columns_of(model), cond.field)
    spellings = sorted(cond.spellings())
    if not spellings:
        return false()
    return normalized_column(col).in_(spellings)


def compile_rule(rule: StageRule, model: Any) -> ColumnElement[bool]:
    if not rule.any_of:
        return true()
    return or_(*(compile_condition(c, model) for c in rule.any_of))


def stage_predicate(stage: LifecycleStage, model: Any) -> ColumnElement[bool]:
    """
    stage 的判定谓词 = 本条规则命中 AND 前面所有规则都未命中。
    与 classify(record) == stage 一一等价。
    """
    idx = _RULE_INDEX[stage]
    rule = STAGE_RULES[idx]
    earlier = [not_(compile_rule(r, model)) for r in STAGE_RULES[:idx] if r.any_of]
    return and_(compile_rule(rule, model), *earlier)


def completed_predicate(model: Any) -> ColumnElement[bool]:
    """已完成（= DELIVERED）谓词；进行中 = NOT completed_predicate。"""
    return stage_predicate(LifecycleStage.DELIVERED, model)


def stage_case(model: Any) -> ColumnElement[int]:
    """返回阶段序号（LifecycleStage 的 int 值）的 CASE 表达式。"""
    whens = [(compile_rule(r, model), int(r.stage)) for r in STAGE_RULES if r.any_of]
    fallback = next(r.stage for r in STAGE_RULES if not r.any_of)
    return case(*whens, else_=int(fallback))


def raw_status_predicate(
    field: str, raw_value: Optional[str], model: Any
) -> Optional[ColumnElement[bool]]:
    """
    列表页原始状态筛选（ship_status=arrived 之类）：
    先按同一口径解析成成员，再编译成该成员全部写法的 IN 条件。
    空值返回 None（不过滤）；未识别的写法按原样精确匹配归一值。
    """
    kind = STATUS_FIELDS[field]
    member = kind.parse(raw_value)
    if member.name == "UNSET":
        return None
    col = getattr(_columns_of(model), field)
    if member.name == "UNRECOGNIZED":
        return normalized_column(col) == normalize_raw_status(raw_value)
    return compile_condition(FieldIn(field, frozenset({member})), model)

