"""
Request Validation

An application-wide ValidationPolicy decides how JSON request bodies are
checked against the pydantic model a view declares with @validate_body:

- whitelist: fields the model does not declare are stripped
- forbid_non_whitelisted: fields the model does not declare reject the request
- transform: values are coerced to the declared types ("42" -> 42);
  without it validation runs in strict mode
"""

from functools import wraps
from typing import List, Set, Type

from flask import Flask, current_app, request
from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import RequestValidationError

EXTENSION_KEY = "validation_policy"


class ValidationPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    whitelist: bool = True
    forbid_non_whitelisted: bool = True
    transform: bool = True


def install_validation_policy(app: Flask, policy: ValidationPolicy) -> None:
    app.extensions[EXTENSION_KEY] = policy


def current_policy() -> ValidationPolicy:
    return current_app.extensions.get(EXTENSION_KEY) or ValidationPolicy()


def _declared_fields(schema: Type[BaseModel]) -> Set[str]:
    names = set()
    for name, field in schema.model_fields.items():
        names.add(name)
        if field.alias:
            names.add(field.alias)
    return names


def _format_errors(error: ValidationError) -> List[str]:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        messages.append(f"{location}: {item['msg']}" if location else item["msg"])
    return messages


def validate_payload(schema: Type[BaseModel], data, policy: ValidationPolicy) -> BaseModel:
    """
    Validate one decoded JSON body against schema under policy.

    Raises:
        RequestValidationError: body is not an object, carries undeclared
            fields while they are forbidden, or fails model validation
    """
    if not isinstance(data, dict):
        raise RequestValidationError(["Request body must be a JSON object"])

    unknown = sorted(set(data) - _declared_fields(schema))
    if unknown and policy.whitelist:
        if policy.forbid_non_whitelisted:
            raise RequestValidationError([f"property {name} should not exist" for name in unknown])
        data = {key: value for key, value in data.items() if key not in unknown}

    try:
        return schema.model_validate(data, strict=not policy.transform)
    except ValidationError as e:
        raise RequestValidationError(_format_errors(e)) from e


def validate_body(schema: Type[BaseModel]):
    """
    View decorator: validate the JSON body and pass the model as ``body``.

    Example:
        @bp.post("/students")
        @validate_body(StudentCreate)
        def create_student(body):
            ...
    """
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            data = request.get_json(silent=True)
            if data is None:
                raise RequestValidationError(["Request body must be valid JSON"])
            kwargs["body"] = validate_payload(schema, data, current_policy())
            return view(*args, **kwargs)

        # Read by the OpenAPI document builder
        wrapper.request_schema = schema
        return wrapper
    return decorator
