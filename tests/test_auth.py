import pytest

from trackmate.auth import SessionContext, extract_bearer_token
from trackmate.errors import AuthenticationError


class TestBearerHeader:

    def test_extracts_token(self):
        assert extract_bearer_token('Bearer abc') == 'abc'
        assert extract_bearer_token('bearer abc ') == 'abc'

    @pytest.mark.parametrize('header', [None, '', 'Basic abc', 'Token abc'])
    def test_missing_or_wrong_scheme(self, header):
        with pytest.raises(AuthenticationError, match='Missing or invalid Authorization header'):
            extract_bearer_token(header)

    def test_empty_token(self):
        with pytest.raises(AuthenticationError, match='Empty bearer token'):
            extract_bearer_token('Bearer    ')


class TestTokenVerifier:

    def test_issue_and_authenticate(self, verifier):
        token = verifier.issue_token('u1')
        assert verifier.authenticate(f'Bearer {token}') == 'u1'

    def test_unknown_token(self, verifier):
        with pytest.raises(AuthenticationError, match='Unauthorized'):
            verifier.authenticate('Bearer nope')

    def test_revoked_token(self, verifier):
        token = verifier.issue_token('u1')
        assert verifier.revoke_token(token)
        assert verifier.verify(token) is None


class TestSessionContext:

    def test_listeners_follow_identity_changes(self, verifier):
        token = verifier.issue_token('u1')
        context = SessionContext(verifier)
        seen = []
        context.subscribe(seen.append)

        assert context.hydrate(token) == 'u1'
        assert context.is_authenticated
        context.hydrate(token)
        context.sign_out()
        assert seen == ['u1', None]

    def test_invalid_token_signs_out(self, verifier):
        context = SessionContext(verifier)
        context.sign_in('u1')
        assert context.hydrate('bogus') is None
        assert context.user_id is None

    def test_unsubscribe(self):
        context = SessionContext()
        seen = []
        unsubscribe = context.subscribe(seen.append)
        unsubscribe()
        context.sign_in('u1')
        assert seen == []

    def test_require_user(self):
        context = SessionContext()
        with pytest.raises(AuthenticationError):
            context.require_user()
        context.sign_in('u1')
        assert context.require_user() == 'u1'
