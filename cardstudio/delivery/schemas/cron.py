from typing import List, Literal, Optional

from pydantic import Field

from cardstudio.delivery.schemas.template import CamelModel


class PersonOutcome(CamelModel):
    name: str
    status: Literal["success", "error"]
    error: Optional[str] = None
    is_ai_generated: Optional[bool] = Field(default=None, alias="isAIGenerated")
    birthday: bool = False
    work_anniversary: bool = False


class CelebrationSummary(CamelModel):
    message: str
    ai_status: Literal["available", "unavailable"]
    processed: List[PersonOutcome] = Field(default_factory=list)
    error: Optional[str] = None
    timestamp: str
