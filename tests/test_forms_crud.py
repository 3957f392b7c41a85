import pytest
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from formclone.crud import forms as forms_crud
from formclone.crud.forms import (
    create_form_db, delete_form_db, get_form_db, update_form_db, validate_question_entries
)
from formclone.models.form import Form, Option, Question, QuestionType
from formclone.schemas.form import FormCreateRequest, FormUpdateRequest


def _create(db, owner, **overrides):
    data = {
        "title": "Original",
        "description": "first version",
        "questions": [
            {"question": "Name?", "type": "text"},
            {"question": "Colour?", "type": "radio", "options": ["Red", "Green", "Blue"]},
            {"question": "Pets?", "type": "checkbox", "options": ["Cat", "Dog"]},
        ],
    }
    data.update(overrides)
    return create_form_db(FormCreateRequest(**data), owner.id, db)

def _snapshot(db, form_id):
    questions = (
        db.query(Question.id, Question.question_text, Question.question_order)
        .filter(Question.form_id == form_id)
        .order_by(Question.question_order)
        .all()
    )
    options = (
        db.query(Option.question_id, Option.option_text, Option.option_order)
        .join(Question, Question.id == Option.question_id)
        .filter(Question.form_id == form_id)
        .order_by(Option.question_id, Option.option_order)
        .all()
    )
    return [tuple(row) for row in questions], [tuple(row) for row in options]


def test_create_then_read_preserves_order(db, owner):
    form_id = _create(db, owner)

    form = get_form_db(form_id, db, user_id=owner.id)

    assert [q["question_text"] for q in form["questions"]] == ["Name?", "Colour?", "Pets?"]
    assert [q["question_order"] for q in form["questions"]] == [0, 1, 2]
    assert "options" not in form["questions"][0]
    assert form["questions"][1]["options"] == ["Red", "Green", "Blue"]
    assert form["questions"][2]["options"] == ["Cat", "Dog"]

def test_create_uses_explicit_order_when_given(db, owner):
    form_id = _create(db, owner, questions=[
        {"question": "Second", "type": "text", "order": 1},
        {"question": "First", "type": "text", "order": 0},
    ])

    form = get_form_db(form_id, db)

    assert [q["question_text"] for q in form["questions"]] == ["First", "Second"]

def test_create_defaults_description_to_empty_string(db, owner):
    form_id = _create(db, owner, description=None, questions=[])

    assert get_form_db(form_id, db)["description"] == ""

def test_create_failure_leaves_nothing_behind(db, owner, monkeypatch):
    def broken(*args, **kwargs):
        raise SQLAlchemyError("simulated storage failure")

    monkeypatch.setattr(forms_crud, "_build_question", broken)

    with pytest.raises(HTTPException) as excinfo:
        _create(db, owner)

    assert excinfo.value.status_code == 500
    assert db.query(Form).count() == 0
    assert db.query(Question).count() == 0

def test_update_replaces_whole_question_set(db, owner):
    form_id = _create(db, owner)
    old_ids = [row[0] for row in _snapshot(db, form_id)[0]]

    update_form_db(form_id, FormUpdateRequest(
        title="Renamed",
        description="second version",
        questions=[{"question": "Only one now", "type": "checkbox", "options": ["X", "Y"]}],
    ), owner.id, db)

    form = get_form_db(form_id, db)
    assert form["title"] == "Renamed"
    assert form["description"] == "second version"
    assert len(form["questions"]) == 1
    assert form["questions"][0]["question_text"] == "Only one now"
    assert form["questions"][0]["options"] == ["X", "Y"]
    assert db.query(Question).filter(Question.id.in_(old_ids)).count() == 0
    assert db.query(Option).count() == 2

def test_update_skips_malformed_entries(db, owner):
    form_id = _create(db, owner)

    result = update_form_db(form_id, FormUpdateRequest(
        title="T",
        questions=[
            {"question": "Kept", "type": "text"},
            {"type": "text"},
            {"question": "No type"},
            {"question": "Bad type", "type": "dropdown"},
            "not an object",
            {"question": "Also kept", "type": "radio", "options": ["A", "", "C"]},
        ],
    ), owner.id, db)

    assert result["question_count"] == 2
    assert [entry["index"] for entry in result["skipped"]] == [1, 2, 3, 4]

    form = get_form_db(form_id, db)
    assert [q["question_text"] for q in form["questions"]] == ["Kept", "Also kept"]
    # Input positions are kept, so the skipped entries leave gaps
    assert [q["question_order"] for q in form["questions"]] == [0, 5]
    assert form["questions"][1]["options"] == ["A", "C"]

def test_update_failure_keeps_previous_questions(db, owner, monkeypatch):
    form_id = _create(db, owner)
    before = _snapshot(db, form_id)

    real_build = forms_crud._build_question
    calls = []

    def fail_on_second(*args, **kwargs):
        calls.append(args)
        if len(calls) == 2:
            raise SQLAlchemyError("simulated storage failure")
        return real_build(*args, **kwargs)

    monkeypatch.setattr(forms_crud, "_build_question", fail_on_second)

    with pytest.raises(HTTPException) as excinfo:
        update_form_db(form_id, FormUpdateRequest(
            title="Should not stick",
            questions=[
                {"question": "New 1", "type": "text"},
                {"question": "New 2", "type": "text"},
                {"question": "New 3", "type": "text"},
            ],
        ), owner.id, db)

    assert excinfo.value.status_code == 500
    assert _snapshot(db, form_id) == before
    assert db.query(Form.title).filter(Form.id == form_id).scalar() == "Original"

def test_update_by_non_owner_is_not_found_and_changes_nothing(db, owner):
    form_id = _create(db, owner)
    before = _snapshot(db, form_id)

    with pytest.raises(HTTPException) as excinfo:
        update_form_db(form_id, FormUpdateRequest(title="Hijacked", questions=[]), owner.id + 1, db)

    assert excinfo.value.status_code == 404
    assert _snapshot(db, form_id) == before

def test_delete_removes_questions_and_options(db, owner):
    form_id = _create(db, owner)

    delete_form_db(form_id, owner.id, db)

    assert db.query(Form).filter(Form.id == form_id).count() == 0
    assert db.query(Question).count() == 0
    assert db.query(Option).count() == 0

    with pytest.raises(HTTPException) as excinfo:
        delete_form_db(form_id, owner.id, db)
    assert excinfo.value.status_code == 404

def test_delete_by_non_owner_keeps_children(db, owner):
    form_id = _create(db, owner)
    before = _snapshot(db, form_id)

    with pytest.raises(HTTPException) as excinfo:
        delete_form_db(form_id, owner.id + 1, db)

    assert excinfo.value.status_code == 404
    assert _snapshot(db, form_id) == before

def test_owner_scoped_read_hides_other_users_forms(db, owner):
    form_id = _create(db, owner)

    with pytest.raises(HTTPException) as excinfo:
        get_form_db(form_id, db, user_id=owner.id + 1)
    assert excinfo.value.status_code == 404

    # The respondent path does not scope by owner
    assert get_form_db(form_id, db)["id"] == form_id

def test_validate_question_entries_normalizes_accepted_entries():
    accepted, rejected = validate_question_entries([
        {"question": "Q", "type": "checkbox", "options": ["a", 3, "b"], "order": 7},
        {"question": "   ", "type": "text"},
        {"question": "R", "type": "textarea", "options": "not a list", "order": True},
    ])

    assert rejected == [{"index": 1, "reason": "Missing question text"}]
    assert accepted[0] == {
        "index": 0,
        "question": "Q",
        "type": QuestionType.CHECKBOX,
        "options": ["a", "", "b"],
        "order": 7,
    }
    assert accepted[1]["options"] == []
    assert accepted[1]["order"] == 2
