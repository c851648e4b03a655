# app/services/order_classifier.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List

from app.models.enums import RawStatus
from app.services.order_lifecycle_types import STAGE_COLORS, STAGE_LABELS, LifecycleStage
from app.services.order_stage_rules import STATUS_FIELDS, match_rule


def classify(record: Any) -> LifecycleStage:
    """
    订单 → 唯一生命周期阶段（全函数，无 unknown 输出）。

    record 只要求能 getattr 出状态字段（OrderRecord / ORM 行 / SimpleNamespace 皆可），
    缺字段按“未设置”处理；未识别的状态字不会命中任何规则，落到兜底阶段。
    """
    return match_rule(record).stage


def stage_label(stage: LifecycleStage) -> str:
    return STAGE_LABELS[stage]


def stage_color(stage: LifecycleStage) -> str:
    return STAGE_COLORS[stage]


def describe(record: Any) -> Dict[str, Any]:
    """列表行展示用：阶段 key + 中文标签 + 颜色 class。"""
    stage = classify(record)
    return {
        "stage": stage.key,
        "stage_label": stage_label(stage),
        "stage_color": stage_color(stage),
    }


def parse_statuses(record: Any) -> Dict[str, RawStatus]:
    return {name: kind.parse(getattr(record, name, None)) for name, kind in STATUS_FIELDS.items()}


def unrecognized_fields(records: Iterable[Any]) -> List[tuple[str, str]]:
    """收集记录中出现的未识别状态字：[(field, raw), ...]（去重，按出现顺序）。"""
    seen: List[tuple[str, str]] = []
    for rec in records:
        for name, member in parse_statuses(rec).items():
            if member.name != "UNRECOGNIZED":
                continue
            pair = (name, str(getattr(rec, name, None)))
            if pair not in seen:
                seen.append(pair)
    return seen
