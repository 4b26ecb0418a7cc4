"""Bakım danışmanı - Bedrock Nova ile yağlama tavsiyesi ve risk özeti.

Model çağrısı başarısız olursa istisna yükseltilmez, dile uygun bir hata
mesajı döndürülür.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import date
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.models.maintenance import Equipment, ServiceStatus
from src.services.schedule import DateLike, classify_status

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "us.amazon.nova-lite-v1:0"

SYSTEM_PROMPTS = {
    "en": "You are an expert in industrial lubrication and reliability. Please provide concise, actionable advice in English.",
    "zh": "你是一位精通摩擦学和润滑可靠性的工业维护专家。请用中文提供简洁、可操作的建议。如果用户询问上下文中提到的特定设备，请分析提供的数据。",
}

ERROR_MESSAGES = {
    "en": "Sorry, the maintenance assistant is unavailable right now. Please try again later.",
    "zh": "抱歉，维护助手暂时不可用，请稍后再试。",
}


def _locale(locale: str) -> str:
    return locale if locale in SYSTEM_PROMPTS else "en"


class MaintenanceAdvisor:
    """Metin tamamlama servisine ince bir sarmalayıcı."""

    def __init__(
        self,
        model_id: str = DEFAULT_MODEL_ID,
        region_name: str = "us-east-1",
        bedrock_runtime_client: Optional[Any] = None,
    ):
        self.model_id = model_id
        self.bedrock_runtime = bedrock_runtime_client or boto3.client(
            "bedrock-runtime", region_name=region_name
        )

    def invoke_model(self, prompt: str, system: Optional[str] = None,
                     max_tokens: int = 1000, temperature: float = 0.5) -> str:
        """Nova modelini çağırır ve yanıt metnini döndürür."""
        body: dict[str, Any] = {
            "messages": [{"role": "user", "content": [{"text": prompt}]}],
            "inferenceConfig": {"max_new_tokens": max_tokens, "temperature": temperature},
        }
        if system:
            body["system"] = [{"text": system}]
        response = self.bedrock_runtime.invoke_model(
            modelId=self.model_id,
            contentType="application/json",
            accept="application/json",
            body=json.dumps(body, ensure_ascii=False),
        )
        result = json.loads(response["body"].read())
        return result.get("output", {}).get("message", {}).get("content", [{}])[0].get("text", "")

    async def _complete(self, prompt: str, locale: str, system: Optional[str] = None) -> str:
        try:
            return await asyncio.to_thread(self.invoke_model, prompt, system)
        except (ClientError, BotoCoreError, KeyError, IndexError, ValueError) as e:
            logger.error("Bedrock çağrısı başarısız: %s", e)
            return ERROR_MESSAGES[_locale(locale)]

    async def get_advice(
        self, query: str, equipment_context: Optional[list[Equipment]] = None, locale: str = "zh"
    ) -> str:
        context = ""
        if equipment_context:
            summary = [
                {"name": e.name, "type": e.type, "lubricant": e.lubricant, "nextDue": e.next_service_date}
                for e in equipment_context
            ]
            context = f"\nContext - Current Equipment List:\n{json.dumps(summary, ensure_ascii=False)}\n"
        prompt = f"User Query: {query}\n{context}"
        return await self._complete(prompt, locale, system=SYSTEM_PROMPTS[_locale(locale)])

    async def summarize_risk(
        self, equipment: list[Equipment], locale: str = "zh", today: Optional[DateLike] = None
    ) -> str:
        """Gecikmiş ekipmanlar için kısa bir yönetici risk özeti ister."""
        ref = today if today is not None else date.today()
        overdue = [e for e in equipment if classify_status(e.next_service_date, ref) == ServiceStatus.OVERDUE]
        details = json.dumps(
            [{"name": e.name, "nextDue": e.next_service_date} for e in overdue], ensure_ascii=False
        )
        if _locale(locale) == "zh":
            prompt = (
                f"分析以下润滑状态:\n设备总数: {len(equipment)}\n逾期设备数: {len(overdue)}\n"
                f"逾期详情: {details}\n\n"
                f"请提供一份简短的、分条列出的行政摘要，评估风险等级并提出建议的立即采取措施。请用中文回答。"
            )
        else:
            prompt = (
                f"Analyze the following lubrication status:\nTotal Equipment: {len(equipment)}\n"
                f"Overdue Count: {len(overdue)}\nOverdue Details: {details}\n\n"
                f"Please provide a short, bulleted executive summary, assessing risk level and "
                f"suggesting immediate actions."
            )
        return await self._complete(prompt, locale)
