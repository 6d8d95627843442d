"""
Form Parser Service
Turns raw multipart / query strings into typed values at the request boundary
"""

import json
import math
from typing import Any, List, Optional, Type, TypeVar, Union
from fastapi import HTTPException, status
from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def describe_validation_errors(errors: List[dict], prefix: Optional[str] = None) -> str:
    """Render pydantic error dicts as "field: message; field: message" """
    parts = []
    for error in errors:
        loc = [str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path", "form", "root")]
        if prefix:
            loc.insert(0, prefix)
        msg = error.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


class FormParser:
    """Helpers that raise 400 naming the offending field"""

    @staticmethod
    def _bad_request(detail: str) -> HTTPException:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    @classmethod
    def parse_number(cls, value: Any, field: str) -> Optional[float]:
        if value is None or str(value).strip() == "":
            return None
        try:
            number = float(str(value).strip())
        except ValueError:
            raise cls._bad_request(f"{field} must be a valid number")
        if not math.isfinite(number):
            raise cls._bad_request(f"{field} must be a valid number")
        return number

    @classmethod
    def parse_int(cls, value: Any, field: str) -> Optional[int]:
        if value is None or str(value).strip() == "":
            return None
        try:
            return int(str(value).strip())
        except ValueError:
            raise cls._bad_request(f"{field} must be a valid integer")

    @classmethod
    def parse_string_list(cls, value: Union[str, List[str], None], field: str) -> List[str]:
        """
        Accepts a JSON array, a comma separated string, or repeated values.
        Items are trimmed, lower-cased and de-duplicated (order kept).
        """
        if value is None:
            return []

        raw_items = value if isinstance(value, list) else [value]
        items: List[str] = []
        for raw in raw_items:
            if not isinstance(raw, str):
                raise cls._bad_request(f"{field} must be an array of strings")
            text = raw.strip()
            if text.startswith("["):
                try:
                    parsed = json.loads(text)
                except json.JSONDecodeError:
                    raise cls._bad_request(f"Invalid {field} format")
                if not isinstance(parsed, list) or not all(isinstance(i, str) for i in parsed):
                    raise cls._bad_request(f"{field} must be an array of strings")
                items.extend(parsed)
            else:
                items.extend(text.split(","))

        seen = set()
        normalized = []
        for item in items:
            key = item.strip().lower()
            if key and key not in seen:
                seen.add(key)
                normalized.append(key)
        return normalized

    @classmethod
    def parse_json_model(cls, raw: Any, model: Type[ModelT], field: str) -> Optional[ModelT]:
        """Parse a JSON text (or already decoded) value into `model`"""
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise cls._bad_request(f"Invalid {field} format: {exc.msg}")
        try:
            return model.model_validate(raw)
        except ValidationError as exc:
            raise cls._bad_request(
                f"Invalid {field}: {describe_validation_errors(exc.errors(include_url=False))}"
            )

    @classmethod
    def build(cls, model: Type[ModelT], **values) -> ModelT:
        """Instantiate `model`, turning cross-field validation failures into 400"""
        try:
            return model(**values)
        except ValidationError as exc:
            raise cls._bad_request(describe_validation_errors(exc.errors(include_url=False)))


form_parser = FormParser()
