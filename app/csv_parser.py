"""
CSV parsing for the published business and product sheets

Rows are split on newlines before field parsing, so a newline inside a
quoted field is not reconstructed.
"""
from typing import Dict, List

import structlog

from constants import (
    BUSINESS_MIN_COLUMNS,
    DEFAULT_CATEGORY,
    IN_STOCK_TEXT,
    PRODUCT_MIN_COLUMNS,
)
from exceptions import ParseError
from records import BusinessRecord, ProductRecord, group_by_category
from url_resolver import direct_image_url
from utils import parse_float, slugify_name

logger = structlog.get_logger("csv_parser")


def parse_row(line: str) -> List[str]:
    """
    Split one CSV line into trimmed fields.

    Handles double-quoted fields, commas inside quotes and "" escapes.
    """
    fields = []
    current = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current).strip())
    return fields


def _data_lines(text: str) -> List[str]:
    lines = [line for line in (text or "").split("\n") if line.strip()]
    # First line is the header
    return lines[1:]


def _optional(row: List[str], index: int) -> str:
    return row[index] if len(row) > index else ""


def _optional_cost(row: List[str], index: int):
    # Blank, unparsable and zero costs all mean "not set"
    return parse_float(_optional(row, index)) or None


def business_from_row(row: List[str]) -> BusinessRecord:
    if len(row) < BUSINESS_MIN_COLUMNS:
        raise ParseError(f"Business row has {len(row)} columns, expected {BUSINESS_MIN_COLUMNS}")
    try:
        return BusinessRecord(
            id=slugify_name(row[0]),
            name=row[0],
            owner_name=row[1],
            address=row[2],
            phone_number=row[3],
            whatsapp_number=row[4],
            email_address=row[5],
            has_delivery=row[6].lower() == "yes",
            delivery_area=row[7],
            operation_hours=row[8],
            special_hours=row[9],
            profile_picture_url=row[10],
            product_sheet_url=row[11],
            status=row[12].lower(),
            bio=row[13],
            map_location=_optional(row, 14),
            delivery_cost=_optional_cost(row, 15),
            island_wide_delivery=_optional(row, 16),
            island_wide_delivery_cost=_optional_cost(row, 17),
        )
    except (AttributeError, IndexError, TypeError) as e:
        raise ParseError(f"Malformed business row: {e}") from e


def product_from_row(row: List[str]) -> ProductRecord:
    if len(row) < PRODUCT_MIN_COLUMNS:
        raise ParseError(f"Product row has {len(row)} columns, expected {PRODUCT_MIN_COLUMNS}")
    try:
        return ProductRecord(
            name=row[0],
            category=row[1] or DEFAULT_CATEGORY,
            price=parse_float(row[2], default=0.0),
            description=row[3],
            image_url=direct_image_url(row[4]) if row[4] else "",
            in_stock=row[5].strip().lower() == IN_STOCK_TEXT,
        )
    except (AttributeError, IndexError, TypeError) as e:
        raise ParseError(f"Malformed product row: {e}") from e


def parse_business_rows(text: str) -> List[BusinessRecord]:
    """Visible businesses in sheet order. Malformed rows are skipped."""
    businesses = []
    for line in _data_lines(text):
        row = parse_row(line)
        if len(row) < BUSINESS_MIN_COLUMNS:
            logger.debug("Skipping short business row", columns=len(row))
            continue
        try:
            business = business_from_row(row)
        except ParseError as e:
            logger.warning("Failed to parse business row", error=e.message, line=line[:200])
            continue

        if business.is_visible:
            businesses.append(business)
        else:
            logger.debug("Dropping hidden business", name=business.name, status=business.status)

    return businesses


def parse_product_list(text: str) -> List[ProductRecord]:
    """Products in sheet order. Malformed rows are skipped."""
    products = []
    for line in _data_lines(text):
        row = parse_row(line)
        if len(row) < PRODUCT_MIN_COLUMNS:
            logger.debug("Skipping short product row", columns=len(row))
            continue
        try:
            products.append(product_from_row(row))
        except ParseError as e:
            logger.warning("Failed to parse product row", error=e.message, line=line[:200])
    return products


def parse_product_rows(text: str) -> Dict[str, List[ProductRecord]]:
    """Products grouped by category, categories in first-seen order"""
    return group_by_category(parse_product_list(text))
