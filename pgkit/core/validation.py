"""Input models for tool arguments.

Every tool validates its arguments against one of these models before any
database work happens. Failures surface as ``InputValidationError``.
"""

from typing import Annotated, Any, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError

from .guards import InputValidationError

IDENTIFIER_PATTERN = r"^[a-zA-Z_][a-zA-Z0-9_]*$"
MAX_STATEMENT_LENGTH = 50000

Identifier = Annotated[str, StringConstraints(min_length=1, max_length=63, pattern=IDENTIFIER_PATTERN)]


class ToolInput(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class QueryInput(ToolInput):
    """Arguments of the query tool."""
    statement: str = Field(min_length=1, max_length=MAX_STATEMENT_LENGTH)
    # Element types are checked by the substitution engine, not here.
    parameters: Optional[list[Any]] = None
    page_size: Optional[int] = Field(default=None, ge=1, le=500)
    offset: Optional[int] = Field(default=None, ge=0)


class TableInput(ToolInput):
    """Schema plus table, both required."""
    schema_name: Identifier = Field(alias="schema")
    table: Identifier


class OptionalSchemaInput(ToolInput):
    schema_name: Optional[Identifier] = Field(default=None, alias="schema")


class SchemaTableInput(ToolInput):
    """Schema required, table optional."""
    schema_name: Identifier = Field(alias="schema")
    table: Optional[Identifier] = None


class ListSchemasInput(ToolInput):
    include_system_schemas: bool = False


class ExplainInput(ToolInput):
    """Arguments of the explain_query tool."""
    statement: str = Field(min_length=1, max_length=MAX_STATEMENT_LENGTH)
    analyze: bool = False
    buffers: bool = False
    costs: bool = True
    format: Literal["text", "json", "xml", "yaml"] = "text"


ModelT = TypeVar("ModelT", bound=ToolInput)


def _format_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"{location}: {first['msg']}"
    return first["msg"]


def validate_input(model: type[ModelT], **arguments) -> ModelT:
    """
    Validate tool arguments against a model.
    Raises InputValidationError describing the first problem.
    Returns the validated model.
    """
    # Unset optional arguments arrive as None; let the model defaults apply.
    present = {key: value for key, value in arguments.items() if value is not None}
    try:
        return model(**present)
    except ValidationError as e:
        raise InputValidationError(f"Input validation failed: {_format_error(e)}")
