"""LLM-based transaction extraction and categorization using Google AI."""
import json
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from google import genai
from google.genai import errors, types
from pydantic import ValidationError

from ledgerflow.config.settings import RESOURCES_DIR, get_settings
from ledgerflow.files.models import PAGE_BREAK
from ledgerflow.utils.logger import get_logger
from ledgerflow.utils.exceptions import ErrorCode, LLMError
from .models import CandidateTransaction, CategorizationResult

logger = get_logger()

USER_PROMPT_PREFIX = "Please analyze this bank statement text and extract all transactions as JSON:"


def load_categories(categories_path: Path = None) -> List[str]:
    """Load the closed category list from categories.json."""
    if categories_path is None:
        categories_path = RESOURCES_DIR / "categories.json"
    try:
        with open(categories_path, "r", encoding="utf-8") as f:
            categories = json.load(f)["categories"]
    except Exception as e:
        raise LLMError(ErrorCode.PROCESSING_FAILED, f"Failed to load categories: {e}")

    if "Other" not in categories:
        categories.append("Other")
    return categories


def build_system_instruction(categories: Sequence[str]) -> str:
    """Fixed instruction enumerating the categories and the output contract."""
    category_lines = "\n".join(f"- {category}" for category in categories)
    return f"""You are a financial analyst specialized in categorizing bank transactions.
You will receive bank statement text and need to extract all transactions.
For each transaction, determine if it's a credit or expense.

Categorize each expense into one of these categories:
{category_lines}

For each transaction, provide:
- date: DD/MM/YYYY format
- time: HH:MM if the statement shows it, otherwise omit
- description: cleaned-up merchant or counterparty description
- original_description: description exactly as printed on the statement
- amount: positive number
- type: "credit" or "expense"
- category: one of the categories above (use "Other" if none fits)
- bank: issuing bank name if shown
- account_id: last digits of the account or card if shown

IMPORTANT: Keep all dates in DD/MM/YYYY format.
Return ONLY a JSON array of transaction objects, with no markdown formatting.
Your response must be parseable by a standard JSON parser."""


def select_pages(text_or_pages: Union[str, Sequence[str]], selected_pages: Optional[Sequence[int]] = None) -> str:
    """
    Build the statement text sent to the model.

    Args:
        text_or_pages: Whole text blob, or the list of page texts
        selected_pages: 1-based page numbers to keep (pages only)

    Returns:
        Selected pages joined by the page-break marker, or the whole text
    """
    if isinstance(text_or_pages, str):
        return text_or_pages

    pages = list(text_or_pages)
    if not selected_pages:
        return PAGE_BREAK.join(pages)

    return PAGE_BREAK.join(
        pages[number - 1] if 1 <= number <= len(pages) else ""
        for number in selected_pages
    )


def sort_by_date(transactions: List[CandidateTransaction]) -> List[CandidateTransaction]:
    """Stable ascending sort on the normalized date."""
    return sorted(transactions, key=lambda txn: txn.normalized_date)


class StatementCategorizer:
    """Extracts and categorizes transactions from statement text with Gemini."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        categories: Optional[List[str]] = None,
        client=None
    ):
        """
        Initialize categorizer.

        Args:
            api_key: Google AI API key; required unless ``client`` is given
            model_name: Gemini model, defaults to settings
            temperature: Sampling temperature, defaults to settings (low)
            categories: Closed category list, defaults to categories.json
            client: Pre-built client exposing ``models.generate_content``
        """
        settings = get_settings()
        self.api_key = api_key
        self.model_name = model_name or settings.llm_model_name
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.categories = list(categories) if categories else load_categories()
        self.system_instruction = build_system_instruction(self.categories)
        self.client = client

        logger.info(f"Statement categorizer initialized with {self.model_name}")

    def categorize(
        self,
        text_or_pages: Union[str, Sequence[str]],
        selected_pages: Optional[Sequence[int]] = None
    ) -> CategorizationResult:
        """
        Extract categorized transactions from statement text.

        Never raises and never retries; the caller decides whether to resubmit.

        Args:
            text_or_pages: Extracted text, or page texts
            selected_pages: 1-based pages to analyze when pages are given

        Returns:
            CategorizationResult with transactions sorted by date
        """
        try:
            statement_text = select_pages(text_or_pages, selected_pages)
            response_text, total_tokens = self._call_model(statement_text)
            transactions = self._parse_response(response_text)

            for txn in transactions:
                txn.category = self._assign_category(txn)

            transactions = sort_by_date(transactions)
            logger.info(f"Categorized {len(transactions)} transactions ({total_tokens} tokens)")
            return CategorizationResult(
                success=True,
                transactions=transactions,
                total_tokens=total_tokens
            )

        except LLMError as e:
            logger.error(f"Categorization failed [{e.code.value}]: {e.message}")
            return CategorizationResult.failure(e.code, e.message, e.raw_response)
        except Exception as e:
            logger.error(f"Categorization failed: {e}")
            return CategorizationResult.failure(ErrorCode.PROCESSING_FAILED, str(e))

    def _get_client(self):
        if self.client is None:
            if not self.api_key:
                raise LLMError(ErrorCode.MISSING_CREDENTIALS, "Gemini API key not configured")
            self.client = genai.Client(api_key=self.api_key)
        return self.client

    def _call_model(self, statement_text: str) -> Tuple[str, Optional[int]]:
        """Send one request; returns response text and total token count."""
        client = self._get_client()
        logger.info("Sending statement text to the model for categorization...")

        try:
            response = client.models.generate_content(
                model=self.model_name,
                contents=f"{USER_PROMPT_PREFIX}\n\n{statement_text}",
                config=types.GenerateContentConfig(
                    system_instruction=self.system_instruction,
                    temperature=self.temperature
                )
            )
        except errors.APIError as e:
            raise LLMError(self._classify_api_error(e), self._api_error_message(e))

        usage = getattr(response, "usage_metadata", None)
        total_tokens = getattr(usage, "total_token_count", None)
        return (response.text or "").strip(), total_tokens

    @staticmethod
    def _classify_api_error(error: errors.APIError) -> ErrorCode:
        """Map an API failure onto quota, credential or generic codes."""
        code = getattr(error, "code", None)
        status = (getattr(error, "status", None) or "").upper()
        message = (getattr(error, "message", None) or str(error)).lower()

        if code == 429 or status == "RESOURCE_EXHAUSTED" or "quota" in message:
            return ErrorCode.QUOTA_EXCEEDED
        if (
            code in (401, 403)
            or status in ("UNAUTHENTICATED", "PERMISSION_DENIED")
            or "api key not valid" in message
            or "api_key_invalid" in message
        ):
            return ErrorCode.INVALID_CREDENTIALS
        return ErrorCode.PROCESSING_FAILED

    def _api_error_message(self, error: errors.APIError) -> str:
        code = self._classify_api_error(error)
        if code is ErrorCode.QUOTA_EXCEEDED:
            return "Gemini API quota exceeded. Please check your usage limits."
        if code is ErrorCode.INVALID_CREDENTIALS:
            return "Invalid Gemini API key. Please check your configuration."
        return getattr(error, "message", None) or str(error)

    def _parse_response(self, response_text: str) -> List[CandidateTransaction]:
        """
        Parse the model's JSON array.

        Items that do not fit the transaction schema are skipped; a body that
        is not JSON, or not an array, fails the whole response.
        """
        cleaned = response_text.strip()
        if cleaned.startswith("```"):
            # Remove markdown code blocks
            lines = cleaned.split("\n")
            cleaned = "\n".join(lines[1:-1]) if len(lines) > 2 else cleaned

        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.debug(f"Response text: {response_text[:500]}")
            raise LLMError(
                ErrorCode.INVALID_JSON_RESPONSE,
                f"Model returned invalid JSON format: {e}",
                raw_response=response_text
            )

        if not isinstance(data, list):
            logger.debug(f"Response text: {response_text[:500]}")
            raise LLMError(
                ErrorCode.INVALID_JSON_RESPONSE,
                "Model response is not an array of transactions",
                raw_response=response_text
            )

        transactions = []
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning(f"Skipping non-object transaction at index {index}: {item!r}")
                continue
            try:
                transactions.append(CandidateTransaction.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid transaction at index {index}: {e}")

        return transactions

    def _assign_category(self, txn: CandidateTransaction) -> str:
        """Keep the model's category when it is in the closed set, else Other."""
        if txn.category in self.categories:
            return txn.category

        logger.warning(f"Invalid category '{txn.category}' for '{txn.description}', using 'Other'")
        return "Other"
