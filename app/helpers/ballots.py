import json
import logging
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel, ConfigDict, Field, StrictBool, create_model, field_validator, model_validator,
)
from pydantic import ValidationError as SchemaError

from app.extensions import db
from app.errors import ConflictError, NotFound, ValidationError
from app.models import BallotTemplate

logger = logging.getLogger(__name__)

FieldType = Literal["text", "textarea", "number", "select", "boolean"]


class BallotField(BaseModel):
    """One input on a ballot form. Unknown keys (placeholder, help text...) are kept."""
    model_config = ConfigDict(extra="allow")

    key: str
    label: Optional[str] = None
    type: FieldType = "text"
    required: bool = False
    options: Optional[List[Union[str, int]]] = None
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None

    @field_validator("key")
    @classmethod
    def key_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Every field needs a key.")
        return v

    @model_validator(mode="after")
    def check_type_settings(self):
        if self.type == "select" and not self.options:
            raise ValueError(f"Select field '{self.key}' needs a non-empty options list.")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"Field '{self.key}' has min greater than max.")
        return self


class BallotSchema(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    ballot_fields: List[BallotField] = Field(default_factory=list, alias="fields")

    @field_validator("ballot_fields")
    @classmethod
    def keys_unique(cls, fields: List[BallotField]) -> List[BallotField]:
        seen = set()
        for f in fields:
            if f.key in seen:
                raise ValueError(f"Duplicate field key '{f.key}'.")
            seen.add(f.key)
        return fields


class BallotPayload(BaseModel):
    """What a judge submits: {"winner": "aff"|"neg", "fields": {...}, "comments": "..."}"""
    model_config = ConfigDict(populate_by_name=True)

    winner: Literal["aff", "neg"]
    field_values: Dict[str, Any] = Field(default_factory=dict, alias="fields")
    comments: Optional[str] = None

    @field_validator("comments")
    @classmethod
    def blank_comments_to_none(cls, v: Optional[str]) -> Optional[str]:
        return (v or "").strip() or None


def _describe(err: SchemaError, labels: Optional[dict] = None) -> str:
    """First pydantic error as one readable sentence."""
    first = err.errors()[0]
    if first["type"] == "value_error":
        return str(first["ctx"]["error"])

    name = ".".join(str(p) for p in first["loc"])
    if labels and first["loc"]:
        name = labels.get(first["loc"][-1], name)
    if first["type"] == "missing":
        return f"'{name}' is required."
    if not name:
        return f"{first['msg']}."
    return f"'{name}': {first['msg']}."


def parse_schema(raw) -> dict:
    """
    Accept a schema as a dict or a JSON string (the admin form posts text)
    and validate its shape. Raises ValidationError with a readable message.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else {"fields": []}
        except json.JSONDecodeError as e:
            raise ValidationError(f"Schema is not valid JSON: {e.msg} (line {e.lineno})")

    if not isinstance(raw, dict):
        raise ValidationError("Schema must be a JSON object.")

    try:
        schema = BallotSchema.model_validate(raw)
    except SchemaError as e:
        raise ValidationError(_describe(e))
    return schema.model_dump(by_alias=True, exclude_none=True)


def _values_model(schema: BallotSchema):
    """Build a pydantic model for the field values a ballot must carry."""
    definitions = {}
    for i, f in enumerate(schema.ballot_fields):
        if f.type == "number":
            annotation, constraints = float, {"ge": f.min, "le": f.max}
        elif f.type == "boolean":
            annotation, constraints = StrictBool, {}
        elif f.type == "select":
            annotation, constraints = Literal[tuple(f.options)], {}
        else:
            annotation, constraints = str, {}

        if f.required:
            definitions[f"field_{i}"] = (annotation, Field(..., alias=f.key, **constraints))
        else:
            definitions[f"field_{i}"] = (Optional[annotation], Field(None, alias=f.key, **constraints))

    return create_model("BallotValues", __config__=ConfigDict(extra="ignore"), **definitions)


def template_for_tournament(tournament_id: Optional[int]) -> Optional[BallotTemplate]:
    """
    Tournament default, then any tournament template, then the global default.
    """
    if tournament_id:
        scoped = (
            BallotTemplate.query
            .filter_by(tournament_id=tournament_id)
            .order_by(BallotTemplate.is_default.desc(), BallotTemplate.id.asc())
            .first()
        )
        if scoped:
            return scoped

    return (
        BallotTemplate.query
        .filter(BallotTemplate.tournament_id.is_(None), BallotTemplate.is_default.is_(True))
        .first()
    )


def validate_ballot_result(schema: Optional[dict], payload) -> dict:
    """
    Check a judge's ballot against the template schema. With no template only
    the winner is required. Returns the cleaned payload stored on the pairing.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Ballot must be a JSON object.")
    try:
        ballot = BallotPayload.model_validate(payload)
    except SchemaError as e:
        raise ValidationError(_describe(e))

    parsed = BallotSchema.model_validate(schema or {})
    labels = {f.key: f.label or f.key for f in parsed.ballot_fields}

    # Blank inputs count as not filled in
    values = {k: v for k, v in ballot.field_values.items() if v is not None and v != ""}
    try:
        checked = _values_model(parsed).model_validate(values)
    except SchemaError as e:
        raise ValidationError(_describe(e, labels))

    clean = {}
    for key, value in checked.model_dump(by_alias=True, exclude_none=True).items():
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        clean[key] = value

    return {"winner": ballot.winner, "fields": clean, "comments": ballot.comments}


# --- Template CRUD (admin) ---

def _clear_other_defaults(template: BallotTemplate):
    q = BallotTemplate.query.filter(BallotTemplate.id != template.id, BallotTemplate.is_default.is_(True))
    if template.tournament_id is None:
        q = q.filter(BallotTemplate.tournament_id.is_(None))
    else:
        q = q.filter(BallotTemplate.tournament_id == template.tournament_id)
    for other in q.all():
        other.is_default = False


def _ensure_unique_key(template_key: str, tournament_id, exclude_id=None):
    q = BallotTemplate.query.filter(BallotTemplate.template_key == template_key)
    if tournament_id is None:
        q = q.filter(BallotTemplate.tournament_id.is_(None))
    else:
        q = q.filter(BallotTemplate.tournament_id == tournament_id)
    if exclude_id:
        q = q.filter(BallotTemplate.id != exclude_id)
    if q.first():
        raise ConflictError(f"A template with key '{template_key}' already exists.")


def create_template(data: dict) -> BallotTemplate:
    template_key = (data.get("template_key") or "").strip()
    if not template_key:
        raise ValidationError("Template key is required.")

    tournament_id = data.get("tournament_id") or None
    _ensure_unique_key(template_key, tournament_id)

    template = BallotTemplate(
        tournament_id=tournament_id,
        template_key=template_key,
        event_style=(data.get("event_style") or "LD").strip(),
        schema=parse_schema(data.get("schema", {"fields": []})),
        html=data.get("html"),
        is_default=bool(data.get("is_default", False)),
    )
    db.session.add(template)
    db.session.flush()

    if template.is_default:
        _clear_other_defaults(template)

    db.session.commit()
    logger.info("[BALLOT] Created template %s (%s)", template.id, template.template_key)
    return template


def update_template(template_id: int, data: dict) -> BallotTemplate:
    template = db.session.get(BallotTemplate, template_id)
    if not template:
        raise NotFound("Ballot template not found.")

    if "template_key" in data:
        template_key = (data.get("template_key") or "").strip()
        if not template_key:
            raise ValidationError("Template key is required.")
        _ensure_unique_key(template_key, template.tournament_id, exclude_id=template.id)
        template.template_key = template_key

    if "schema" in data:
        template.schema = parse_schema(data["schema"])
    if "event_style" in data:
        template.event_style = (data.get("event_style") or "LD").strip()
    if "html" in data:
        template.html = data.get("html")
    if "is_default" in data:
        template.is_default = bool(data["is_default"])
        if template.is_default:
            _clear_other_defaults(template)

    db.session.commit()
    return template


def delete_template(template_id: int):
    template = db.session.get(BallotTemplate, template_id)
    if not template:
        raise NotFound("Ballot template not found.")
    db.session.delete(template)
    db.session.commit()
