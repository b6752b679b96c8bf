"""Keyword-based smart tag classifier.

Rules are evaluated in table order and every matching rule contributes one
tag, so a description that mentions both steel and paint yields two tags.
"""

from proflow.tags.schemas import SmartTag, SmartTagRule

SMART_TAG_RULES: tuple[SmartTagRule, ...] = (
    SmartTagRule(
        keywords=("gỗ", "ván", "mdf", "melamine", "laminat"),
        label="Gỗ",
        color="bg-orange-100 text-orange-700",
    ),
    SmartTagRule(
        keywords=("sắt", "inox", "thép", "hàn", "kim loại"),
        label="Kim loại",
        color="bg-slate-200 text-slate-700",
    ),
    SmartTagRule(
        keywords=("sơn", "phủ", "pu", "tĩnh điện"),
        label="Sơn",
        color="bg-pink-100 text-pink-700",
    ),
    SmartTagRule(
        keywords=("kính", "gương", "thủy"),
        label="Kính",
        color="bg-sky-100 text-sky-700",
    ),
    SmartTagRule(
        keywords=("đá", "granite", "marble"),
        label="Đá",
        color="bg-stone-200 text-stone-700",
    ),
    SmartTagRule(
        keywords=("điện", "led", "nguồn"),
        label="Điện",
        color="bg-yellow-100 text-yellow-700",
    ),
    SmartTagRule(
        keywords=("lắp", "ráp", "đặt"),
        label="Lắp đặt",
        color="bg-lime-100 text-lime-700",
    ),
)


def detect_tags(text: str | None) -> list[SmartTag]:
    """Detect smart tags from a task description.

    Args:
        text: Free-text task description.

    Returns:
        list[SmartTag]: One tag per matching rule, in rule order.
    """
    if not text:
        return []

    lower_text = text.lower()
    return [
        SmartTag(label=rule.label, color=rule.color)
        for rule in SMART_TAG_RULES
        if any(keyword in lower_text for keyword in rule.keywords)
    ]
