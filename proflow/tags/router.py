"""Smart tag API routes."""

from fastapi import APIRouter

from proflow.tags.classifier import SMART_TAG_RULES, detect_tags
from proflow.tags.schemas import DetectRequest, SmartTag, SmartTagRule

router = APIRouter()


@router.get("/rules", response_model=list[SmartTagRule])
async def list_rules() -> list[SmartTagRule]:
    """List the smart tag rules in evaluation order."""
    return list(SMART_TAG_RULES)


@router.post("/detect", response_model=list[SmartTag])
async def detect(data: DetectRequest) -> list[SmartTag]:
    """Preview the tags a task description would receive.

    Args:
        data: Text to classify.

    Returns:
        list[SmartTag]: Detected tags.
    """
    return detect_tags(data.text)
