from __future__ import annotations

import unittest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scm.auth import Role
from scm.config import settings
from scm.db import get_db
from scm.main import app
from scm.models import AuditLog, Base, WebSession
from scm.security.sessions import create_web_session

CSRF = 'csrf-test-token'


class WebRouteTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine(
            'sqlite://',
            poolclass=StaticPool,
            connect_args={'check_same_thread': False},
        )
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

        def _get_db():
            with self.Session() as db:
                yield db

        app.dependency_overrides[get_db] = _get_db
        self.addCleanup(app.dependency_overrides.clear)

        session_patch = patch('scm.security.sessions.SessionLocal', self.Session)
        session_patch.start()
        self.addCleanup(session_patch.stop)

        self.provider = MagicMock()
        provider_patch = patch('scm.routers.auth.get_identity_provider', return_value=self.provider)
        provider_patch.start()
        self.addCleanup(provider_patch.stop)

        self.client = TestClient(app)
        self.client.cookies.set('csrf_token', CSRF)

    def tearDown(self) -> None:
        self.engine.dispose()

    def _sign_in_as(self, role: Role, user_id: str = 'user-1') -> str:
        with self.Session() as db:
            token = create_web_session(
                db,
                user_id=user_id,
                email=f'{user_id}@example.com',
                role=role,
                provider_access_token='provider-token',
                ip=None,
                user_agent=None,
            )
            db.commit()
        self.client.cookies.set(settings.session_cookie_name, token)
        return token

    def test_logout_revokes_session_and_redirects_to_login(self) -> None:
        token = self._sign_in_as(Role.CUSTOMER)

        response = self.client.post('/logout', data={'csrf_token': CSRF}, follow_redirects=False)

        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers['location'], '/login')
        cleared = [value for value in response.headers.get_list('set-cookie') if value.startswith(f'{settings.session_cookie_name}=')]
        self.assertEqual(len(cleared), 1)
        self.assertIn('Max-Age=0', cleared[0])
        self.provider.sign_out.assert_called_once_with(access_token='provider-token')

        with self.Session() as db:
            web_session = db.execute(select(WebSession).where(WebSession.session_token == token)).scalar_one()
            self.assertIsNotNone(web_session.revoked_at)
            actions = db.execute(select(AuditLog.action)).scalars().all()
        self.assertIn('AUTH_LOGOUT', actions)

    def test_revoked_session_no_longer_reaches_role_pages(self) -> None:
        token = self._sign_in_as(Role.CUSTOMER)
        self.client.post('/logout', data={'csrf_token': CSRF}, follow_redirects=False)
        self.client.cookies.set(settings.session_cookie_name, token)

        response = self.client.get('/customer/homepage', follow_redirects=False)

        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers['location'], '/login')

    def test_logout_without_csrf_field_is_forbidden(self) -> None:
        self._sign_in_as(Role.CUSTOMER)

        response = self.client.post('/logout', data={}, follow_redirects=False)

        self.assertEqual(response.status_code, 403)
        self.provider.sign_out.assert_not_called()

    def test_anonymous_request_to_role_page_redirects_to_login(self) -> None:
        response = self.client.get('/employee/orders', follow_redirects=False)

        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers['location'], '/login')
        self.assertEqual(response.headers['x-robots-tag'], 'noindex, nofollow, noarchive')
        self.assertEqual(response.headers['x-content-type-options'], 'nosniff')

    def test_customer_cannot_open_manager_pages(self) -> None:
        self._sign_in_as(Role.CUSTOMER)

        response = self.client.get('/manager/homepage', follow_redirects=False)

        self.assertEqual(response.status_code, 403)

    def test_root_redirects_signed_in_user_home(self) -> None:
        self._sign_in_as(Role.MANAGER)

        response = self.client.get('/', follow_redirects=False)

        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers['location'], '/manager/homepage')

    def test_placeholder_stats_are_public(self) -> None:
        response = self.client.get('/api/manager/order-returns')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [{'type': 'Orders', 'value': 120}, {'type': 'Returns', 'value': 15}])
        self.assertEqual(response.headers['x-robots-tag'], 'noindex, nofollow, noarchive')

    def test_robots_txt_disallows_everything(self) -> None:
        response = self.client.get('/robots.txt')

        self.assertEqual(response.status_code, 200)
        self.assertIn('Disallow: /', response.text)


if __name__ == '__main__':
    unittest.main()
