from __future__ import annotations

import io
import json
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scm.models import Base
from scm.services.identity_provider import IdentityProviderError
from scm.services.local_identity_provider import LocalIdentityProvider
from scm.services.supabase_identity_provider import SupabaseIdentityProvider


class LocalIdentityProviderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine(
            'sqlite://',
            poolclass=StaticPool,
            connect_args={'check_same_thread': False},
        )
        Base.metadata.create_all(self.engine)
        self.provider = LocalIdentityProvider(session_factory=sessionmaker(bind=self.engine, expire_on_commit=False))

    def tearDown(self) -> None:
        self.engine.dispose()

    def test_sign_up_then_sign_in(self) -> None:
        created = self.provider.sign_up(email=' Ada@Example.com ', password='secret')
        signed_in = self.provider.sign_in_with_password(email='ada@example.com', password='secret')

        self.assertEqual(created.email, 'ada@example.com')
        self.assertEqual(signed_in.user_id, created.user_id)
        self.assertEqual(self.provider.get_user(access_token=signed_in.access_token).user_id, created.user_id)

    def test_duplicate_email_rejected(self) -> None:
        self.provider.sign_up(email='ada@example.com', password='secret')

        with self.assertRaisesRegex(IdentityProviderError, 'already registered'):
            self.provider.sign_up(email='ada@example.com', password='other')

    def test_wrong_password_rejected(self) -> None:
        self.provider.sign_up(email='ada@example.com', password='secret')

        with self.assertRaisesRegex(IdentityProviderError, 'Invalid login credentials'):
            self.provider.sign_in_with_password(email='ada@example.com', password='nope')

    def test_tampered_token_is_not_a_user(self) -> None:
        identity = self.provider.sign_up(email='ada@example.com', password='secret')

        self.assertIsNone(self.provider.get_user(access_token=identity.user_id + '.forged'))


def _response(payload: dict) -> MagicMock:
    response = MagicMock()
    response.read.return_value = json.dumps(payload).encode('utf-8')
    response.__enter__.return_value = response
    return response


class SupabaseIdentityProviderTests(unittest.TestCase):
    def setUp(self) -> None:
        settings_patch = patch(
            'scm.services.supabase_identity_provider.settings',
            SimpleNamespace(
                supabase_url='https://project.supabase.co/',
                supabase_anon_key='anon-key',
                supabase_timeout_seconds=5,
            ),
        )
        settings_patch.start()
        self.addCleanup(settings_patch.stop)

    @patch('scm.services.supabase_identity_provider.urlopen')
    def test_sign_in_posts_password_grant(self, urlopen_mock) -> None:
        urlopen_mock.return_value = _response(
            {'access_token': 'jwt', 'user': {'id': 'uuid-1', 'email': 'ada@example.com'}}
        )

        identity = SupabaseIdentityProvider().sign_in_with_password(email='ada@example.com', password='secret')

        request = urlopen_mock.call_args.args[0]
        self.assertEqual(request.full_url, 'https://project.supabase.co/auth/v1/token?grant_type=password')
        self.assertEqual(request.get_method(), 'POST')
        self.assertEqual(request.get_header('Apikey'), 'anon-key')
        self.assertEqual(identity.user_id, 'uuid-1')
        self.assertEqual(identity.access_token, 'jwt')

    @patch('scm.services.supabase_identity_provider.urlopen')
    def test_error_body_message_is_surfaced(self, urlopen_mock) -> None:
        body = io.BytesIO(json.dumps({'error_description': 'Invalid login credentials'}).encode('utf-8'))
        urlopen_mock.side_effect = HTTPError('https://x', 400, 'Bad Request', {}, body)

        with self.assertRaisesRegex(IdentityProviderError, 'Invalid login credentials'):
            SupabaseIdentityProvider().sign_in_with_password(email='ada@example.com', password='bad')

    @patch('scm.services.supabase_identity_provider.urlopen')
    def test_sign_up_reads_confirmation_style_body(self, urlopen_mock) -> None:
        urlopen_mock.return_value = _response({'id': 'uuid-2', 'email': 'bo@example.com'})

        identity = SupabaseIdentityProvider().sign_up(email='bo@example.com', password='secret')

        self.assertEqual(identity.user_id, 'uuid-2')
        self.assertIsNone(identity.access_token)

    @patch('scm.services.supabase_identity_provider.urlopen')
    def test_sign_out_without_token_skips_request(self, urlopen_mock) -> None:
        SupabaseIdentityProvider().sign_out(access_token=None)

        urlopen_mock.assert_not_called()

    def test_missing_configuration_rejected(self) -> None:
        with patch(
            'scm.services.supabase_identity_provider.settings',
            SimpleNamespace(supabase_url=None, supabase_anon_key=None, supabase_timeout_seconds=5),
        ):
            with self.assertRaisesRegex(ValueError, 'SUPABASE_URL'):
                SupabaseIdentityProvider()


if __name__ == '__main__':
    unittest.main()
