"""Quality-control schemas for defect extraction.

`ExtractedRecord` doubles as the output contract handed to the model: its
JSON schema (camelCase aliases, all seven properties required) is what the
extraction backend is constrained to return. `Fragment` is the immutable
snapshot of one user-entered text block and its extraction state.
"""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


NEW_PART_LABEL = "新品"
REPAIRED_PART_LABEL = "返修件"


class ExtractedRecord(BaseModel):
    """Seven structured fields extracted from one defect report."""

    name: str = Field(..., description="名称")
    part_number: str = Field(..., description="件号")
    is_customer_return: str = Field(
        ...,
        description=f'是否客服返修件: "{NEW_PART_LABEL}" 或 "{REPAIRED_PART_LABEL}"',
    )
    supplier_name: str = Field(..., description="供应商名称")
    problem_point: str = Field(..., description="问题点")
    defect_batch: str = Field(..., description="不良批次")
    defect_quantity: str = Field(
        ..., description='不良数量: 数字或带单位的字符串, 如 "1" 或 "1个"'
    )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="forbid",
        frozen=True,
    )


def new_fragment_id() -> str:
    return str(uuid.uuid4())


class Fragment(BaseModel):
    """One free-text fragment plus its extraction lifecycle state."""

    id: str = Field(default_factory=new_fragment_id)
    text: str = ""
    is_processing: bool = False
    result: ExtractedRecord | None = None
    error: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_settled_state(self) -> Fragment:
        if self.result is not None and self.error is not None:
            raise ValueError("a fragment cannot carry both a result and an error")
        if self.is_processing and (self.result is not None or self.error is not None):
            raise ValueError("a processing fragment has no result or error yet")
        return self

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())

    @property
    def is_eligible(self) -> bool:
        """True when `process_all` should extract this fragment."""
        return self.has_text and self.result is None and not self.is_processing

    @property
    def status_label(self) -> str:
        if self.is_processing:
            return "Extracting..."
        if self.result is not None:
            return "Extraction Complete"
        if self.error is not None:
            return self.error
        return ""

    def update(self, **changes: Any) -> Fragment:
        """Return a validated copy with *changes* applied."""
        return Fragment.model_validate({**self.model_dump(), **changes})
