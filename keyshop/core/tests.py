"""
Test suite for Core module
Tests: role access gate, role-gated endpoints, current user, token claims, seed command
"""
from io import StringIO
from decimal import Decimal

from django.contrib.auth.models import AnonymousUser
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken

from keyshop.catalog.models import Product
from keyshop.core.access import Decision, authorize, require_role
from keyshop.core.models import AuditLog, Role, User
from keyshop.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class AuthorizeTests(SimpleTestCase):
    """Test the role decision on its own"""

    def test_matching_role_is_allowed(self):
        for role in Role:
            decision = authorize(User(username='u', role=role), role)
            self.assertTrue(decision.allowed)

    def test_mismatched_role_is_forbidden(self):
        decision = authorize(User(username='u', role=Role.CUSTOMER), Role.ADMIN)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.status, status.HTTP_403_FORBIDDEN)
        self.assertEqual(decision.message, 'Forbidden')

        decision = authorize(User(username='u', role=Role.ADMIN), Role.CUSTOMER)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.status, status.HTTP_403_FORBIDDEN)

    def test_anonymous_user_is_allowed(self):
        """The gate only compares roles; authentication is a separate check"""
        for role in Role:
            self.assertTrue(authorize(AnonymousUser(), role).allowed)
            self.assertTrue(authorize(None, role).allowed)

    def test_role_value_is_accepted(self):
        self.assertTrue(authorize(User(username='u', role=Role.ADMIN), 'admin').allowed)
        self.assertFalse(authorize(User(username='u', role=Role.ADMIN), 'customer').allowed)

    def test_unknown_role_raises(self):
        with self.assertRaises(ValueError):
            authorize(User(username='u', role=Role.ADMIN), 'superuser')

    def test_user_is_not_modified(self):
        user = User(username='u', role=Role.CUSTOMER)
        authorize(user, Role.ADMIN)
        self.assertEqual(user.role, Role.CUSTOMER)

    def test_reject_statuses(self):
        unauthorized = Decision.reject(status.HTTP_401_UNAUTHORIZED)
        self.assertEqual((unauthorized.status, unauthorized.message), (401, 'Unauthorized'))
        forbidden = Decision.reject(status.HTTP_403_FORBIDDEN)
        self.assertEqual((forbidden.status, forbidden.message), (403, 'Forbidden'))
        self.assertTrue(Decision.allow().allowed)

    def test_require_role_builds_named_permission(self):
        permission_class = require_role(Role.ADMIN)
        self.assertEqual(permission_class.__name__, 'RequiresAdminRole')
        self.assertEqual(permission_class.required_role, Role.ADMIN)
        with self.assertRaises(ValueError):
            require_role('manager')


class RoleGatedEndpointTests(TestCase):
    """Test the gate as bound to the user admin routes"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_anonymous_request_is_unauthorized(self):
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_customer_is_forbidden(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(str(response.data['detail']), 'Forbidden')

    def test_admin_is_allowed(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_admin_creates_user(self):
        self.client.authenticate_user(self.admin)
        data = {
            'username': 'new_customer',
            'email': 'new_customer@test.com',
            'name': 'New Customer',
            'role': 'customer',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], 'customer')
        self.assertTrue(User.objects.get(username='new_customer').check_password('Str0ng-pass-123'))

    def test_create_user_rejects_unknown_role(self):
        self.client.authenticate_user(self.admin)
        data = {
            'username': 'someone',
            'role': 'manager',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data)

    def test_create_user_password_mismatch(self):
        self.client.authenticate_user(self.admin)
        data = {
            'username': 'someone',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'something-else-456',
        }
        response = self.client.post('/api/v1/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_admin_promotes_user(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/users/{self.customer.id}/', {'role': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.role, Role.ADMIN)

    def test_customer_cannot_delete_user(self):
        self.client.authenticate_user(self.customer)
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(User.objects.filter(pk=self.admin.pk).exists())

    def test_missing_user_is_not_found(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class CurrentUserTests(TestCase):
    """Test auth/me and the token role claim"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_me_for_customer(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'customer')
        self.assertFalse(response.data['is_admin'])
        self.assertFalse(response.data['can_manage_catalog'])

    def test_me_for_admin(self):
        user = TestDataFactory.create_admin()
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_admin'])
        self.assertTrue(response.data['can_manage_users'])

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_token_carries_role(self):
        TestDataFactory.create_admin(username='boss', password='testpass123')
        response = self.client.post(
            '/api/v1/auth/login/', {'username': 'boss', 'password': 'testpass123'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        token = AccessToken(response.data['access'])
        self.assertEqual(token['role'], 'admin')
        self.assertEqual(token['username'], 'boss')


class SeedCommandTests(TestCase):
    """Test the seed management command"""

    EXPECTED_PRODUCTS = [
        ('Ducky One 2 Mini', Decimal('1200000'), 'Keyboard', 15),
        ('Varminlo TKL', Decimal('1300000'), 'Keyboard', 10),
        ('Ducky One 2 TKL Midnight', Decimal('1100000'), 'Keyboard', 15),
        ('Cherry MX Switches speed silver', Decimal('3500'), 'Switch', 1000),
        ('Keycaps PBT Sunshine full set', Decimal('250000'), 'Keycaps', 50),
        ('Keycaps PBT Transparant full set', Decimal('200000'), 'Keycaps', 0),
    ]

    def seed(self, *args):
        out = StringIO()
        call_command('seed', *args, stdout=out)
        return out.getvalue()

    def test_seed_inserts_catalog_and_user(self):
        output = self.seed()
        products = list(Product.objects.order_by('id').values_list('name', 'price', 'category', 'qty'))
        self.assertEqual(products, self.EXPECTED_PRODUCTS)

        self.assertEqual(User.objects.count(), 1)
        user = User.objects.get()
        self.assertEqual(user.name, 'Test User')
        self.assertEqual(user.email, 'test@example.com')
        self.assertEqual(user.role, Role.CUSTOMER)
        self.assertTrue(user.check_password('password'))
        self.assertIn('Seeded 6 products and 1 user', output)

    def test_seed_clears_existing_rows(self):
        TestDataFactory.create_user()
        TestDataFactory.create_admin()
        TestDataFactory.create_product(name='Leftover')
        self.seed()
        self.assertEqual(Product.objects.count(), 6)
        self.assertFalse(Product.objects.filter(name='Leftover').exists())
        self.assertEqual(User.objects.count(), 1)

    def test_seed_is_idempotent_in_row_count(self):
        self.seed()
        self.seed()
        self.assertEqual(Product.objects.count(), 6)
        self.assertEqual(User.objects.count(), 1)
        self.assertEqual(Product.objects.filter(name='Ducky One 2 Mini').count(), 1)

    def test_seed_admin_flag(self):
        self.seed('--admin')
        self.assertEqual(User.objects.get().role, Role.ADMIN)

    def test_seed_writes_audit_entry(self):
        self.seed()
        entry = AuditLog.objects.get(action='seed')
        self.assertEqual(entry.changes, {'products': 6, 'users': 1})
        self.assertIsNone(entry.user)

    def test_seeded_products_derived_values(self):
        self.seed()
        ducky = Product.objects.get(name='Ducky One 2 Mini')
        self.assertEqual(ducky.formatted_price, '1.200.000')
        switches = Product.objects.get(name='Cherry MX Switches speed silver')
        self.assertEqual(switches.formatted_price, '3.500')


class AuditLogEndpointTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        AuditLog.objects.create(user=self.admin, action='create', model_name='Product', object_id='1', object_name='Varminlo TKL')
        AuditLog.objects.create(user=self.admin, action='delete', model_name='Product', object_id='2', object_name='Ducky One 2 Mini')

    def test_admin_filters_by_action(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/', {'action': 'delete'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry['object_name'] for entry in response.data], ['Ducky One 2 Mini'])

    def test_customer_is_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
