from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError
from schemas import CommentCreate, ProductCreate, UserCreate

T = TypeVar("T", bound=BaseModel)

_REQUIRED = ("missing", "string_too_short")

_MESSAGES = {
    "title": {kind: "Product title is required." for kind in _REQUIRED},
    "description": {kind: "Product description is required." for kind in _REQUIRED},
    "url": {kind: "Product URL is required." for kind in _REQUIRED},
    "project_type": {
        "missing": "Please select a project type.",
        "literal_error": "Invalid project type selected.",
    },
    "is_made_in_my": {"missing": "Please confirm if this product is made in Malaysia."},
    "content": {kind: "Comment content is required." for kind in _REQUIRED},
    "product_id": {"missing": "A product is required."},
}


@dataclass
class ValidationResult(Generic[T]):
    value: Optional[T] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> T:
        if self.errors:
            raise ValidationError(self.errors)
        return self.value


def _clean(data: Mapping[str, Any]) -> Dict[str, Any]:
    # blank form fields count as missing
    cleaned = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        cleaned[key] = value
    return cleaned


def _message(error: Dict[str, Any]) -> str:
    name = str(error["loc"][0]) if error["loc"] else "__root__"
    custom = _MESSAGES.get(name, {}).get(error["type"])
    if custom:
        return custom
    if error["type"] == "value_error":
        cause = error.get("ctx", {}).get("error")
        if cause is not None:
            return str(cause)
    return error["msg"]


def _validate(model: Type[T], data: Mapping[str, Any]) -> ValidationResult[T]:
    try:
        return ValidationResult(value=model.model_validate(_clean(data)))
    except PydanticValidationError as exc:
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            name = str(error["loc"][0]) if error["loc"] else "__root__"
            message = _message(error)
            if message not in errors.setdefault(name, []):
                errors[name].append(message)
        return ValidationResult(errors=errors)


def validate_product(data: Mapping[str, Any]) -> ValidationResult[ProductCreate]:
    return _validate(ProductCreate, data)


def validate_comment(data: Mapping[str, Any]) -> ValidationResult[CommentCreate]:
    return _validate(CommentCreate, data)


def validate_registration(data: Mapping[str, Any]) -> ValidationResult[UserCreate]:
    return _validate(UserCreate, data)
