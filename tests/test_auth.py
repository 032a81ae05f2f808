import time

import pytest
from jose import jwt

from crm.auth import Caller, Operation, authorize, owner_scope, resolve_caller
from crm.config import settings
from crm.errors import Forbidden, Unauthorized
from crm.models import Role

from conftest import make_token


class TestResolveCaller:
    def test_missing_token(self):
        with pytest.raises(Unauthorized):
            resolve_caller(None)

    def test_garbage_token(self):
        with pytest.raises(Unauthorized):
            resolve_caller("not-a-jwt")

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "u1"}, "another-secret", algorithm="HS256")
        with pytest.raises(Unauthorized):
            resolve_caller(token)

    def test_expired_token(self):
        token = make_token("u1", exp=int(time.time()) - 60)
        with pytest.raises(Unauthorized):
            resolve_caller(token)

    def test_token_without_subject(self):
        token = jwt.encode({"role": "admin"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
        with pytest.raises(Unauthorized):
            resolve_caller(token)

    def test_role_defaults_to_teacher(self):
        caller = resolve_caller(make_token("u1"))
        assert caller == Caller(id="u1", role=Role.TEACHER)

    def test_role_claim(self):
        assert resolve_caller(make_token("u1", "admin")).is_admin

    def test_role_from_public_metadata(self):
        token = make_token("u1", public_metadata={"role": "admin"})
        assert resolve_caller(token).role is Role.ADMIN

    def test_unknown_role_rejected(self):
        with pytest.raises(Unauthorized):
            resolve_caller(make_token("u1", "superuser"))


class TestAuthorize:
    teacher = Caller(id="t1")
    admin = Caller(id="a1", role=Role.ADMIN)

    def test_no_caller(self):
        with pytest.raises(Unauthorized):
            authorize(None, Operation.LIST_STUDENTS)

    def test_teacher_on_own_row(self):
        authorize(self.teacher, Operation.UPDATE_STUDENT, resource_owner_id="t1")

    def test_teacher_on_foreign_row(self):
        with pytest.raises(Unauthorized) as exc:
            authorize(self.teacher, Operation.UPDATE_STUDENT, resource_owner_id="t2")
        assert not isinstance(exc.value, Forbidden)

    @pytest.mark.parametrize("operation", [
        Operation.ADMIN_LIST_STUDENTS,
        Operation.ADMIN_LIST_TEACHERS,
        Operation.ADMIN_LIST_LESSONS,
    ])
    def test_admin_operations_need_admin(self, operation):
        with pytest.raises(Forbidden):
            authorize(self.teacher, operation)
        authorize(self.admin, operation)

    def test_admin_may_update_any_lesson(self):
        authorize(self.admin, Operation.UPDATE_LESSON, resource_owner_id="t1")

    def test_admin_is_owner_scoped_elsewhere(self):
        with pytest.raises(Unauthorized):
            authorize(self.admin, Operation.DELETE_LESSON, resource_owner_id="t1")


class TestOwnerScope:
    def test_teacher_always_scoped(self):
        assert owner_scope(Caller(id="t1"), Operation.UPDATE_LESSON) == "t1"

    def test_admin_lesson_update_unscoped(self):
        assert owner_scope(Caller(id="a1", role=Role.ADMIN), Operation.UPDATE_LESSON) is None

    def test_admin_student_update_scoped(self):
        assert owner_scope(Caller(id="a1", role=Role.ADMIN), Operation.UPDATE_STUDENT) == "a1"
