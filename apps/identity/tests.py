import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
from django.test import TestCase, Client, SimpleTestCase

from apps.core.exceptions import Conflict, Unauthorized, ValidationError
from .jwt_auth import (
    JWT_ALGORITHM, JWT_SECRET, create_access_token, create_token_pair, decode_token,
    get_user_id_from_token,
)
from .models import User
from .services import authenticate_user, register_user
from .validation import validate_email, validate_name, validate_password


class ValidationTest(SimpleTestCase):
    def test_validate_email(self):
        self.assertTrue(validate_email("test@example.com"))
        self.assertFalse(validate_email("invalid-email"))
        self.assertFalse(validate_email("test@"))
        self.assertFalse(validate_email("@example.com"))
        self.assertFalse(validate_email(""))
        self.assertFalse(validate_email("a b@example.com"))
        self.assertTrue(validate_email("first.last+tag@example.co.uk"))

    def test_strong_password(self):
        result = validate_password("StrongPass123")
        self.assertTrue(result.valid)
        self.assertEqual(result.errors, [])

    def test_password_rules(self):
        self.assertIn("Password must be at least 8 characters long", validate_password("Short1").errors)
        self.assertIn("Password must contain at least one uppercase letter", validate_password("noupppercase123").errors)
        self.assertIn("Password must contain at least one lowercase letter", validate_password("NOLOWERCASE123").errors)
        self.assertIn("Password must contain at least one number", validate_password("NoNumbers").errors)

    def test_validate_name(self):
        self.assertTrue(validate_name("John Doe"))
        self.assertTrue(validate_name("Jo"))
        self.assertFalse(validate_name("J"))
        self.assertFalse(validate_name(""))
        self.assertFalse(validate_name("   "))


class TokenTest(SimpleTestCase):
    def test_access_token_round_trip(self):
        user_id = uuid4()
        self.assertEqual(get_user_id_from_token(create_access_token(user_id)), user_id)

    def test_refresh_token_only_valid_as_refresh(self):
        user_id = uuid4()
        _, refresh = create_token_pair(user_id)
        self.assertIsNone(get_user_id_from_token(refresh))
        self.assertEqual(get_user_id_from_token(refresh, token_type='refresh'), user_id)

    def test_expired_token(self):
        payload = {
            'sub': 'whatever',
            'exp': datetime.now(timezone.utc) - timedelta(minutes=1),
            'type': 'access',
        }
        token = jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)
        self.assertIsNone(decode_token(token))

    def test_garbage_token(self):
        self.assertIsNone(decode_token("garbage"))


class RegistrationServiceTest(TestCase):
    def test_register_and_authenticate(self):
        user = register_user("Test User", "Test@Example.com", "Password123")
        self.assertEqual(user.email, "test@example.com")
        self.assertEqual(authenticate_user("test@example.com", "Password123").id, user.id)

    def test_duplicate_email(self):
        register_user("Test User", "test@example.com", "Password123")
        with self.assertRaises(Conflict):
            register_user("Another User", "TEST@example.com", "Password123")

    def test_invalid_input(self):
        with self.assertRaises(ValidationError):
            register_user("", "test@example.com", "Password123")
        with self.assertRaises(ValidationError):
            register_user("Test", "not-an-email", "Password123")
        with self.assertRaises(ValidationError) as ctx:
            register_user("Test", "test@example.com", "short")
        self.assertGreater(len(ctx.exception.errors), 1)
        self.assertEqual(User.objects.count(), 0)

    def test_wrong_password(self):
        register_user("Test User", "test@example.com", "Password123")
        with self.assertRaises(Unauthorized):
            authenticate_user("test@example.com", "wrongpassword")


class AuthAPITest(TestCase):
    def setUp(self):
        self.client = Client()

    def post_json(self, path, payload):
        return self.client.post(path, data=json.dumps(payload), content_type='application/json')

    def register(self, email='test@example.com'):
        return self.post_json('/api/auth/register', {
            'name': 'Test User', 'email': email, 'password': 'Password123',
        })

    def test_register(self):
        response = self.register()
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertIn('token', data)
        self.assertIn('refreshToken', data)
        self.assertEqual(data['user']['email'], 'test@example.com')

    def test_register_existing_email(self):
        self.register()
        response = self.register()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'User already exists')
        self.assertEqual(response.json()['error'], 'Conflict')

    def test_register_invalid_email_is_a_validation_error(self):
        response = self.post_json('/api/auth/register', {
            'name': 'Test User', 'email': 'not-an-email', 'password': 'Password123',
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'ValidationError')

    def test_register_requires_all_fields(self):
        response = self.post_json('/api/auth/register', {'email': 'test2@example.com'})
        self.assertEqual(response.status_code, 400)

    def test_login(self):
        self.register()
        response = self.post_json('/api/auth/login', {'email': 'test@example.com', 'password': 'Password123'})
        self.assertEqual(response.status_code, 200)
        self.assertIn('token', response.json())

    def test_login_invalid_credentials(self):
        self.register()
        response = self.post_json('/api/auth/login', {'email': 'test@example.com', 'password': 'wrongpassword'})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['message'], 'Invalid credentials')

    def test_me_and_refresh(self):
        data = self.register().json()

        response = self.client.get('/api/auth/me', HTTP_AUTHORIZATION=f"Bearer {data['token']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['email'], 'test@example.com')

        response = self.post_json('/api/auth/refresh', {'refreshToken': data['refreshToken']})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['refreshToken'], data['refreshToken'])

        response = self.post_json('/api/auth/refresh', {'refreshToken': data['token']})
        self.assertEqual(response.status_code, 401)

    def test_me_requires_token(self):
        self.assertEqual(self.client.get('/api/auth/me').status_code, 401)
