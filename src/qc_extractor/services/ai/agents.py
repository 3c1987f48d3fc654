"""Extraction agent and prompts for quality-control defect reports."""

import logging

from pydantic_ai import Agent, NativeOutput

from qc_extractor.schemas.quality import ExtractedRecord
from qc_extractor.services.ai.model_factory import get_extraction_model


logger = logging.getLogger(__name__)


# System prompt for quality-data extraction
QUALITY_EXTRACTION_PROMPT = """你是一个专业的品质数据提取助手。
请从用户提供的文本中准确提取以下字段：
1. 名称 (name)
2. 件号 (partNumber)
3. 是否客服返修件 (isCustomerReturn): 识别为"新品"或"返修件"。
4. 供应商名称 (supplierName)
5. 问题点 (problemPoint)
6. 不良批次 (defectBatch)
7. 不良数量 (defectQuantity): 提取为数字或带单位的字符串（如 "1" 或 "1个"）。

输出必须是严格的 JSON 格式，不要包含任何 Markdown 代码块包裹。"""

USER_PROMPT_TEMPLATE = '请从以下文本中提取信息： "{text}"'


def build_user_prompt(text: str) -> str:
    """Embed the raw fragment text in the fixed extraction request."""
    return USER_PROMPT_TEMPLATE.format(text=text)


def create_extraction_agent() -> Agent[None, ExtractedRecord]:
    """Create a pydantic-ai agent for quality-data extraction.

    The reply is constrained with the provider's native JSON-schema output
    (no tool-call wrapping) and gets exactly one attempt: a reply that does
    not validate is not sent back to the model for correction.
    """
    model = get_extraction_model()
    return Agent(
        model,
        system_prompt=QUALITY_EXTRACTION_PROMPT,
        output_type=NativeOutput(
            ExtractedRecord,
            name="quality_record",
            description="Structured quality-control defect record",
        ),
        retries=0,
    )
