"""Data models for LLM processing."""
import re
from dataclasses import dataclass, field
import datetime as dt
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ledgerflow.utils.dates import parse_date
from ledgerflow.utils.exceptions import ErrorCode
from ledgerflow.utils.logger import get_logger

logger = get_logger()

TYPE_SYNONYMS = {
    "credit": "credit",
    "income": "credit",
    "deposit": "credit",
    "refund": "credit",
    "expense": "expense",
    "debit": "expense",
    "withdrawal": "expense",
    "payment": "expense",
}

# Currency markers seen on statements: "Rs.", "INR", "₹", "$" ...
_CURRENCY = re.compile(r"\brs\.?|\b(?:inr|usd|eur|gbp)\b|[₹$€£]", re.IGNORECASE)
_NUMBER = re.compile(r"-?\d[\d.,]*")
_COMMA_THOUSANDS = re.compile(r"\d{1,3}(?:,\d{3})+")


def parse_amount(value: Union[int, float, str]) -> float:
    """
    Parse a statement amount into a float.

    Currency markers, spaces and thousands separators are dropped; exactly
    one numeric token must remain. Both ``1,250.50`` and ``1.250,50`` read
    as 1250.5, and Indian grouping (``1,25,000``) is accepted.

    Raises:
        ValueError: If the text does not hold exactly one number
    """
    if isinstance(value, (int, float)):
        return float(value)

    cleaned = re.sub(r"\s+", "", _CURRENCY.sub("", str(value)))
    tokens = _NUMBER.findall(cleaned)
    if len(tokens) != 1:
        raise ValueError(f"Expected one number in amount {value!r}")

    token = tokens[0].rstrip(".,")
    unsigned = token.lstrip("-")
    if "," in token and "." in token:
        if token.rfind(",") > token.rfind("."):
            token = token.replace(".", "").replace(",", ".")
        else:
            token = token.replace(",", "")
    elif "," in token:
        if _COMMA_THOUSANDS.fullmatch(unsigned) or token.count(",") > 1:
            token = token.replace(",", "")
        else:
            token = token.replace(",", ".")
    elif token.count(".") > 1:
        token = token.replace(".", "")

    return float(token)


class CandidateTransaction(BaseModel):
    """Pydantic schema for one transaction proposed by the model."""
    model_config = ConfigDict(extra="ignore")

    date: str = Field(default="", description="Transaction date in DD/MM/YYYY format")
    time: Optional[str] = Field(default=None, description="Transaction time, HH:MM")
    description: str = Field(description="Transaction description")
    original_description: Optional[str] = None
    amount: Union[float, str] = Field(description="Transaction amount")
    type: Literal["credit", "expense"] = Field(description="credit or expense")
    category: str = Field(default="Other", description="Transaction category")
    bank: Optional[str] = None
    account_id: Optional[Union[int, str]] = None
    user: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        if isinstance(value, str):
            return TYPE_SYNONYMS.get(value.strip().lower(), value)
        return value

    @field_validator("date", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value):
        return value or "Other"

    @property
    def normalized_date(self) -> dt.date:
        """Calendar date, epoch sentinel when the model's date is unusable."""
        return parse_date(self.date)

    def amount_value(self) -> float:
        """Amount as a float, 0.0 when the model's amount is unusable."""
        try:
            return parse_amount(self.amount)
        except ValueError as e:
            logger.warning(f"Using 0.0 for amount of '{self.description}': {e}")
            return 0.0


@dataclass
class CategorizationResult:
    """Tagged outcome of one categorization call."""
    success: bool
    transactions: List[CandidateTransaction] = field(default_factory=list)
    total_tokens: Optional[int] = None
    error: Optional[ErrorCode] = None
    message: Optional[str] = None
    raw_response: Optional[str] = None

    @classmethod
    def failure(
        cls,
        error: ErrorCode,
        message: str,
        raw_response: Optional[str] = None
    ) -> "CategorizationResult":
        return cls(success=False, error=error, message=message, raw_response=raw_response)

    def to_dict(self) -> dict:
        payload = {"success": self.success}
        if self.success:
            payload["transactions"] = [txn.model_dump() for txn in self.transactions]
            payload["totalTokens"] = self.total_tokens
        else:
            payload["error"] = self.error.value if self.error else None
            payload["message"] = self.message
            if self.raw_response is not None:
                payload["rawResponse"] = self.raw_response
        return payload
