import pytest

from app.errors import ConflictError, ValidationError
from app.helpers.ballots import (
    create_template, parse_schema, template_for_tournament, update_template, validate_ballot_result,
)

LD_SCHEMA = {
    "fields": [
        {"key": "aff_points", "label": "Aff speaker points", "type": "number", "min": 25, "max": 30, "required": True},
        {"key": "neg_points", "label": "Neg speaker points", "type": "number", "min": 25, "max": 30, "required": True},
        {"key": "decision", "type": "select", "options": ["unanimous", "split"]},
        {"key": "low_point_win", "type": "boolean"},
        {"key": "rfd", "type": "textarea"},
    ]
}


@pytest.mark.parametrize("raw, message", [
    ("{not json", "Schema is not valid JSON"),
    ([], "Schema must be a JSON object."),
    ({"fields": {}}, "'fields'"),
    ({"fields": [{"type": "text"}]}, "'fields.0.key' is required."),
    ({"fields": [{"key": "  "}]}, "Every field needs a key."),
    ({"fields": [{"key": "a"}, {"key": "a"}]}, "Duplicate field key 'a'."),
    ({"fields": [{"key": "a", "type": "date"}]}, "'fields.0.type'"),
    ({"fields": [{"key": "a", "type": "select"}]}, "Select field 'a' needs a non-empty options list."),
    ({"fields": [{"key": "a", "type": "number", "min": 5, "max": 1}]}, "Field 'a' has min greater than max."),
])
def test_bad_schemas_are_rejected(raw, message):
    with pytest.raises(ValidationError) as err:
        parse_schema(raw)
    assert err.value.message.startswith(message)


def test_schema_accepts_json_text():
    schema = parse_schema('{"fields": [{"key": "rfd", "type": "textarea", "placeholder": "Why?"}]}')
    assert schema["fields"][0]["key"] == "rfd"
    assert schema["fields"][0]["placeholder"] == "Why?"


def test_ballot_result_checked_against_schema():
    result = validate_ballot_result(LD_SCHEMA, {
        "winner": "neg",
        "fields": {"aff_points": "28.5", "neg_points": 29, "decision": "split", "low_point_win": False, "rfd": ""},
        "comments": "  Clean extension of the framework  ",
    })
    assert result == {
        "winner": "neg",
        "fields": {"aff_points": 28.5, "neg_points": 29, "decision": "split", "low_point_win": False},
        "comments": "Clean extension of the framework",
    }


def test_ballot_without_template_needs_only_a_winner():
    result = validate_ballot_result(None, {"winner": "aff", "fields": {"anything": 1}})
    assert result == {"winner": "aff", "fields": {}, "comments": None}


@pytest.mark.parametrize("payload, message", [
    ({"winner": "tie"}, "'winner'"),
    ({"winner": "aff", "fields": {"neg_points": 28}}, "'Aff speaker points' is required."),
    ({"winner": "aff", "fields": {"aff_points": 31, "neg_points": 28}}, "'Aff speaker points'"),
    ({"winner": "aff", "fields": {"aff_points": 28, "neg_points": 28, "decision": "3-0"}}, "'decision'"),
    ({"winner": "aff", "fields": {"aff_points": 28, "neg_points": 28, "low_point_win": "yes"}}, "'low_point_win'"),
])
def test_bad_ballots_are_rejected(payload, message):
    with pytest.raises(ValidationError) as err:
        validate_ballot_result(LD_SCHEMA, payload)
    assert err.value.message.startswith(message)


def test_default_template_is_unique_per_scope(make):
    t = make.tournament()
    first = create_template({"template_key": "ld", "schema": LD_SCHEMA, "is_default": True})
    second = create_template({"template_key": "ld-v2", "schema": LD_SCHEMA, "is_default": True})
    scoped = create_template({"template_key": "ld", "tournament_id": t.id, "schema": {"fields": []}})

    assert first.is_default is False
    assert second.is_default is True
    assert template_for_tournament(t.id).id == scoped.id
    assert template_for_tournament(None).id == second.id

    with pytest.raises(ConflictError):
        create_template({"template_key": "ld-v2"})

    update_template(first.id, {"is_default": True})
    assert second.is_default is False


def test_template_routes_are_admin_only(client, login, make):
    resp = client.post("/api/ballot-templates", json={"template_key": "pf"})
    assert resp.status_code == 403

    login(admin=True)
    resp = client.post("/api/ballot-templates", json={"template_key": "pf", "schema": "{oops"})
    assert resp.status_code == 400

    resp = client.post("/api/ballot-templates", json={"template_key": "pf", "schema": LD_SCHEMA, "is_default": True})
    assert resp.status_code == 201

    t = make.tournament()
    resp = client.get(f"/api/tournaments/{t.id}/ballot-template")
    assert resp.get_json()["template"]["template_key"] == "pf"
