import pytest
from sqlalchemy import text

from crm import crud, students
from crm.errors import NotFoundOrForbidden, ValidationError
from crm.schemas import StudentFields, StudentUpdate

from conftest import TEACHER_A, TEACHER_B


class TestCreate:
    def test_round_trip(self, db):
        fields = StudentFields(full_name="Ana", username="ana1", level="B1", description="", isregular=False)
        created = students.create(db, TEACHER_A, fields)

        stored = crud.get_student(db, created.id)
        assert stored.id
        assert stored.teacher_id == TEACHER_A
        assert (stored.full_name, stored.username, stored.level, stored.description, stored.isregular) == (
            "Ana", "ana1", "B1", "", False
        )

    def test_missing_full_name_creates_nothing(self, db):
        with pytest.raises(ValidationError) as exc:
            students.create(db, TEACHER_A, StudentFields(username="ana1", level="B1"))
        assert exc.value.fields == ["full_name"]
        assert students.list_owned(db, TEACHER_A) == []

    def test_all_missing_fields_named(self, db):
        with pytest.raises(ValidationError) as exc:
            students.create(db, TEACHER_A, StudentFields(full_name="", description="x"))
        assert exc.value.fields == ["full_name", "level", "username"]

    def test_isregular_defaults_false(self, db):
        student = students.create(db, TEACHER_A, StudentFields(full_name="Ana", username="ana1", level="A2"))
        assert student.isregular is False

    def test_teacher_id_is_server_assigned(self, db):
        fields = StudentFields.model_validate(
            {"full_name": "Ana", "username": "ana1", "level": "A2", "teacher_id": TEACHER_B}
        )
        assert students.create(db, TEACHER_A, fields).teacher_id == TEACHER_A


class TestListing:
    def test_list_owned_only_returns_own(self, db, make_student):
        make_student(TEACHER_A, full_name="Ana")
        make_student(TEACHER_B, full_name="Ben")

        owned = students.list_owned(db, TEACHER_A)
        assert [s.full_name for s in owned] == ["Ana"]
        assert all(s.teacher_id == TEACHER_A for s in owned)

    def test_list_owned_empty(self, db):
        assert students.list_owned(db, TEACHER_A) == []

    def test_list_all(self, db, make_student):
        make_student(TEACHER_A, full_name="Ana")
        make_student(TEACHER_B, full_name="Ben")
        assert {s.full_name for s in students.list_all(db)} == {"Ana", "Ben"}


class TestUpdate:
    def test_full_replace(self, db, make_student):
        student = make_student(TEACHER_A, description="keen", isregular=True)
        updated = students.update(db, TEACHER_A, StudentUpdate(id=student.id, full_name="Ana L", level="B2"))

        assert updated.full_name == "Ana L"
        assert updated.level == "B2"
        assert updated.username is None
        assert updated.description is None
        assert updated.isregular is False

    def test_requires_id_full_name_level(self, db):
        with pytest.raises(ValidationError) as exc:
            students.update(db, TEACHER_A, StudentUpdate(username="x"))
        assert exc.value.fields == ["id", "full_name", "level"]

    def test_foreign_row_looks_missing(self, db, make_student):
        student = make_student(TEACHER_B, full_name="Ben")
        with pytest.raises(NotFoundOrForbidden):
            students.update(db, TEACHER_A, StudentUpdate(id=student.id, full_name="Hacked", level="C2"))
        db.expire_all()
        assert crud.get_student(db, student.id).full_name == "Ben"

    def test_unknown_id(self, db):
        with pytest.raises(NotFoundOrForbidden):
            students.update(db, TEACHER_A, StudentUpdate(id="missing", full_name="A", level="A1"))


class TestDelete:
    def test_delete_own(self, db, make_student):
        student = make_student(TEACHER_A)
        students.delete(db, TEACHER_A, student.id)
        assert crud.get_student(db, student.id) is None

    def test_delete_foreign_is_noop(self, db, make_student):
        student = make_student(TEACHER_B)
        students.delete(db, TEACHER_A, student.id)
        assert crud.get_student(db, student.id) is not None

    def test_delete_unknown_is_noop(self, db):
        students.delete(db, TEACHER_A, "missing")

    def test_delete_requires_id(self, db):
        with pytest.raises(ValidationError):
            students.delete(db, TEACHER_A, None)

    def test_delete_keeps_lessons_with_foreign_keys_enforced(self, db, users, make_student, make_lesson):
        db.execute(text("PRAGMA foreign_keys=ON"))
        student = make_student(TEACHER_A)
        lesson = make_lesson(student)

        students.delete(db, TEACHER_A, student.id)

        db.expire_all()
        assert crud.get_student(db, student.id) is None
        kept = crud.get_lesson(db, lesson.id)
        assert kept is not None
        assert kept.student_id is None

    def test_delete_foreign_student_leaves_lessons_linked(self, db, make_student, make_lesson):
        student = make_student(TEACHER_B)
        lesson = make_lesson(student)

        students.delete(db, TEACHER_A, student.id)

        db.expire_all()
        assert crud.get_lesson(db, lesson.id).student_id == student.id
