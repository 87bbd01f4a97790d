from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from psu_catalog.exceptions import (
    AlreadyExistsError,
    AppError,
    DatabaseError,
    ErrorKind,
    InternalError,
    InvalidParamError,
    NotFoundError,
    as_app_error,
)
from psu_catalog.exceptions.integrity_classifier import ConstraintViolation, classify_integrity_error
from psu_catalog.exceptions.mapper import map_integrity_error


class FakePostgresError(Exception):
    """Stand-in for a psycopg driver error: message plus sqlstate / diag."""

    def __init__(self, message, sqlstate, constraint_name=None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.diag = SimpleNamespace(constraint_name=constraint_name)


def integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO users ...", {}, orig)


class TestErrorKind:

    @pytest.mark.parametrize(
        "kind, code, status",
        [
            (ErrorKind.INVALID_PARAM, 1001, 400),
            (ErrorKind.UNAUTHORIZED, 1002, 401),
            (ErrorKind.FORBIDDEN, 1003, 403),
            (ErrorKind.NOT_FOUND, 1004, 404),
            (ErrorKind.ALREADY_EXISTS, 1005, 409),
            (ErrorKind.INVALID_TOKEN, 1006, 401),
            (ErrorKind.TOKEN_EXPIRED, 1007, 401),
            (ErrorKind.INVALID_REQUEST, 1008, 400),
            (ErrorKind.INTERNAL_ERROR, 5000, 500),
            (ErrorKind.DATABASE_ERROR, 5001, 500),
            (ErrorKind.CACHE_ERROR, 5002, 500),
            (ErrorKind.SERVICE_ERROR, 5003, 500),
        ],
    )
    def test_codes_and_http_status(self, kind, code, status):
        assert kind.code == code
        assert kind.http_status == status
        assert kind.default_message

    def test_every_kind_has_a_default_message(self):
        assert all(kind.default_message for kind in ErrorKind)


class TestAppError:

    def test_default_message_comes_from_kind(self):
        err = InvalidParamError()
        assert err.message == "invalid parameter"
        assert err.to_payload() == {"code": 1001, "message": "invalid parameter"}

    def test_not_found_message_names_resource(self):
        err = NotFoundError("power supply")
        assert err.message == "power supply not found"
        assert err.resource == "power supply"

    def test_fields_become_payload_data(self):
        err = AlreadyExistsError("user", fields=["username"])
        assert err.to_payload() == {
            "code": 1005,
            "message": "user already exists",
            "data": {"fields": ["username"]},
        }

    def test_cause_is_chained_but_never_in_payload(self):
        """
        Behavior:
            - The low-level cause is kept for logs (__cause__, str()) only.

        Importance:
            - Driver messages can contain SQL and user data; clients must not see them.
        """
        cause = RuntimeError("password authentication failed for user postgres")
        err = DatabaseError(cause=cause)

        assert err.__cause__ is cause
        assert "password authentication failed" in str(err)
        assert "password authentication failed" not in repr(err.to_payload())

    def test_kind_override(self):
        err = AppError("nope", kind=ErrorKind.FORBIDDEN)
        assert err.http_status() == 403
        assert err.to_payload()["code"] == 1003

    def test_as_app_error(self):
        app_err = NotFoundError("user")
        assert as_app_error(app_err) is app_err

        wrapped = as_app_error(ZeroDivisionError("x"))
        assert isinstance(wrapped, InternalError)
        assert wrapped.http_status() == 500
        assert wrapped.message == "internal server error"


class TestIntegrityMapping:

    def test_sqlite_unique_violation(self):
        exc = integrity_error(Exception("UNIQUE constraint failed: users.username"))

        mapped = map_integrity_error(exc, "user")

        assert isinstance(mapped, AlreadyExistsError)
        assert mapped.fields == ["username"]
        assert mapped.message == "user already exists"

    def test_postgres_unique_violation_uses_sqlstate(self):
        orig = FakePostgresError(
            'duplicate key value violates unique constraint "ix_users_email"\n'
            "DETAIL:  Key (email)=(a@b.example) already exists.",
            sqlstate="23505",
            constraint_name="ix_users_email",
        )

        diagnosis = classify_integrity_error(integrity_error(orig))

        assert diagnosis.violation is ConstraintViolation.UNIQUE
        assert diagnosis.constraint == "ix_users_email"
        assert diagnosis.columns == ["email"]

    def test_postgres_not_null_maps_to_database_error(self):
        orig = FakePostgresError('null value in column "name" violates not-null constraint', sqlstate="23502")

        mapped = map_integrity_error(integrity_error(orig), "power supply")

        assert isinstance(mapped, DatabaseError)
        assert mapped.fields == ["name"]
        assert mapped.http_status() == 500

    def test_mysql_errno(self):
        orig = Exception(1062, "Duplicate entry 'bob' for key 'users.ix_users_username'")

        diagnosis = classify_integrity_error(integrity_error(orig))

        assert diagnosis.violation is ConstraintViolation.UNIQUE

    def test_unknown_message_is_not_a_duplicate(self):
        mapped = map_integrity_error(integrity_error(Exception("something odd happened")))

        assert isinstance(mapped, DatabaseError)
        assert mapped.message == "record violates a database constraint"
