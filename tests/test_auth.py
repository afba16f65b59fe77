"""Tests for lead_engine.auth and lead_engine.errors."""
import pytest

from lead_engine.auth import AppRole, check_role, parse_role, require_role
from lead_engine.errors import (
    AuthorizationError,
    LeadEngineError,
    UpstreamStoreError,
    ValidationError,
)


class TestParseRole:

    def test_known_roles(self):
        assert parse_role('recruiter') is AppRole.RECRUITER
        assert parse_role(' ADMIN ') is AppRole.ADMIN

    def test_unknown_role_is_student(self):
        assert parse_role('superuser') is AppRole.STUDENT

    @pytest.mark.parametrize('value', [None, ''])
    def test_missing(self, value):
        assert parse_role(value) is None


class TestCheckRole:

    def test_not_authenticated(self):
        result = check_role(None)
        assert result.authorized is False
        assert result.reason == 'Not authenticated'

    def test_recruiter_allowed(self):
        result = check_role('recruiter')
        assert result.authorized is True
        assert result.role is AppRole.RECRUITER

    def test_admin_passes_any_requirement(self):
        assert check_role('admin', AppRole.STUDENT).authorized is True
        assert check_role('admin', AppRole.RECRUITER).authorized is True

    def test_insufficient(self):
        result = check_role('student')
        assert result.authorized is False
        assert result.reason == 'Insufficient permissions. Required: recruiter, User has: student'

    def test_require_role(self):
        assert require_role(check_role('recruiter')) is AppRole.RECRUITER
        with pytest.raises(AuthorizationError, match='Not authenticated'):
            require_role(check_role(''))


class TestErrors:

    @pytest.mark.parametrize('error_cls,status', [
        (LeadEngineError, 500),
        (ValidationError, 400),
        (AuthorizationError, 403),
        (UpstreamStoreError, 502),
    ])
    def test_status_codes(self, error_cls, status):
        assert error_cls('x').status_code == status

    def test_to_dict(self):
        assert ValidationError('Missing leadIds').to_dict() == {
            'success': False,
            'error': 'Missing leadIds',
            'type': 'ValidationError',
        }

    def test_to_dict_with_details(self):
        body = UpstreamStoreError('down', details={'lead_id': 'a'}).to_dict()
        assert body['details'] == {'lead_id': 'a'}

    def test_subclasses_share_base(self):
        assert issubclass(UpstreamStoreError, LeadEngineError)
        assert str(ValidationError('bad')) == 'bad'
