#!/usr/bin/env python3
"""Tests for authentication module."""

import unittest
from unittest.mock import Mock

from aiohttp import test_utils, web

from src.web.auth import (
    allow_anonymous,
    check_token,
    create_auth_middleware,
    is_anonymous,
)


class TestCheckToken(unittest.TestCase):
    """Test check_token function."""

    def test_token_correct(self):
        self.assertTrue(check_token('s3cret', 's3cret'))

    def test_token_incorrect(self):
        self.assertFalse(check_token('s3cret', 'guess'))

    def test_no_token_configured(self):
        """An empty configured token never matches."""
        self.assertFalse(check_token('', ''))
        self.assertFalse(check_token('', 'anything'))

    def test_no_token_provided(self):
        self.assertFalse(check_token('s3cret', None))
        self.assertFalse(check_token('s3cret', ''))


class TestAllowAnonymous(unittest.TestCase):
    """Test anonymous route marking."""

    def test_marks_handler(self):
        async def handler(request):
            return web.Response()

        self.assertFalse(is_anonymous(handler))
        self.assertIs(allow_anonymous(handler), handler)
        self.assertTrue(is_anonymous(handler))

    def test_unmarked_and_missing_handlers(self):
        self.assertFalse(is_anonymous(None))
        self.assertFalse(is_anonymous(Mock(spec=[])))


def _build_app(token):
    async def public(request):
        return web.Response(text='public')

    async def private(request):
        return web.Response(text='private')

    app = web.Application(middlewares=[create_auth_middleware(token)])
    app.router.add_get('/public', allow_anonymous(public))
    app.router.add_get('/private', private)
    return app


class TestAuthMiddleware(unittest.IsolatedAsyncioTestCase):
    """Test the bearer token middleware."""

    async def test_no_token_allows_everything(self):
        async with test_utils.TestClient(test_utils.TestServer(_build_app(None))) as client:
            resp = await client.get('/private')
            self.assertEqual(resp.status, 200)
            self.assertEqual(await resp.text(), 'private')

    async def test_protected_route_requires_token(self):
        async with test_utils.TestClient(test_utils.TestServer(_build_app('s3cret'))) as client:
            resp = await client.get('/private')
            self.assertEqual(resp.status, 401)
            body = await resp.json()
            self.assertEqual(body, {'success': False, 'error': 'Authentication required'})

    async def test_wrong_token_rejected(self):
        async with test_utils.TestClient(test_utils.TestServer(_build_app('s3cret'))) as client:
            resp = await client.get('/private', headers={'Authorization': 'Bearer guess'})
            self.assertEqual(resp.status, 401)

    async def test_non_bearer_scheme_rejected(self):
        async with test_utils.TestClient(test_utils.TestServer(_build_app('s3cret'))) as client:
            resp = await client.get('/private', headers={'Authorization': 'Basic s3cret'})
            self.assertEqual(resp.status, 401)

    async def test_correct_token_accepted(self):
        async with test_utils.TestClient(test_utils.TestServer(_build_app('s3cret'))) as client:
            resp = await client.get('/private', headers={'Authorization': 'Bearer s3cret'})
            self.assertEqual(resp.status, 200)
            self.assertEqual(await resp.text(), 'private')

    async def test_anonymous_route_skips_token(self):
        async with test_utils.TestClient(test_utils.TestServer(_build_app('s3cret'))) as client:
            resp = await client.get('/public')
            self.assertEqual(resp.status, 200)
            self.assertEqual(await resp.text(), 'public')


if __name__ == '__main__':
    unittest.main()
