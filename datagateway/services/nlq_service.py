"""
Natural-language-to-SQL collaborator client.

Formats the introspected schema into a prompt and asks an OpenAI-compatible
chat-completions endpoint for a single SQL statement.
"""
import logging
import re
from typing import List, Optional

import httpx

from datagateway.core.config import settings
from datagateway.core.errors import AIServiceError
from datagateway.schemas import TableSchema

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """You are an expert SQL writer. Convert the following natural language question to a SQL query.

Database Schema:
{schema}

User Question: {question}

Generate a valid SQL query that answers this question.
Only return the SQL query without any explanation or markdown formatting.
"""

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def format_schema(tables: List[TableSchema]) -> str:
    """Render tables as 'Table: t / Columns: c (type) PRIMARY KEY, ...' blocks"""
    blocks = []
    for table in tables:
        cols = []
        for col in table.columns:
            info = f"{col.name} ({col.declared_type})"
            if col.is_primary_key:
                info += " PRIMARY KEY"
            if col.is_foreign_key and col.references:
                info += f" REFERENCES {col.references.table}({col.references.column})"
            cols.append(info)
        blocks.append(f"Table: {table.name}\nColumns: {', '.join(cols)}")
    return "\n\n".join(blocks)


def strip_code_fences(content: str) -> str:
    return _CODE_FENCE.sub("", content.strip()).strip()


class NlqService:
    """Thin httpx client around the chat-completions API"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_url = api_url or settings.AI_API_URL
        self.api_key = api_key if api_key is not None else settings.AI_API_KEY
        self.model = model or settings.AI_MODEL
        self.timeout = timeout or settings.AI_TIMEOUT_SECONDS
        self.transport = transport

    def generate_sql(self, question: str, tables: List[TableSchema]) -> str:
        """
        Raises:
            AIServiceError: not configured, transport failure, error status or empty answer
        """
        if not self.api_key:
            raise AIServiceError("AI service is not configured")

        payload = {
            "model": self.model,
            "messages": [{
                "role": "user",
                "content": PROMPT_TEMPLATE.format(schema=format_schema(tables), question=question),
            }],
            "temperature": 0.1,
            "max_tokens": 500,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        logger.info(f"Sending NL-to-SQL request ({len(tables)} table(s) in schema)")
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.api_url, headers=headers, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"AI service returned {e.response.status_code}")
            raise AIServiceError(
                f"Failed to convert natural language to SQL: AI service returned {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"AI service call failed: {e}")
            raise AIServiceError(f"Failed to convert natural language to SQL: {e}") from e

        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise AIServiceError("Failed to convert natural language to SQL: malformed AI response") from e

        sql = strip_code_fences(content)
        if not sql:
            raise AIServiceError("Failed to convert natural language to SQL: empty answer")
        return sql


def get_nlq_service() -> NlqService:
    """FastAPI dependency"""
    return NlqService()
