"""
Test suite for Catalog module
Tests: stock classification, price formatting, product API, filters, dashboard summary
"""
from decimal import Decimal

from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework import status

from keyshop.catalog.dashboard_cache import DASHBOARD_CACHE_KEY, get_dashboard_summary
from keyshop.catalog.models import Product
from keyshop.catalog.utils import (
    AVAILABLE, LOW_STOCK, OUT_OF_STOCK,
    classify_stock, classify_stock_legacy, classify_stock_threshold,
    format_price, stock_status_quantity_filter,
)
from keyshop.core.models import AuditLog
from keyshop.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class LegacyStockClassificationTests(SimpleTestCase):
    """Original check order: positive quantities are in stock, the rest is low stock"""

    def test_positive_quantity_is_available(self):
        self.assertEqual(classify_stock_legacy(5), AVAILABLE)
        self.assertEqual(classify_stock_legacy(1), AVAILABLE)
        self.assertEqual(classify_stock_legacy(2), AVAILABLE)

    def test_zero_is_low_stock(self):
        self.assertEqual(classify_stock_legacy(0), LOW_STOCK)

    def test_out_of_stock_is_never_returned(self):
        for qty in range(-3, 1001):
            self.assertNotEqual(classify_stock_legacy(qty), OUT_OF_STOCK)


class ThresholdStockClassificationTests(SimpleTestCase):
    """Corrected order: nothing on hand is out of stock, 1-2 units is low stock"""

    def test_available(self):
        self.assertEqual(classify_stock_threshold(5), AVAILABLE)
        self.assertEqual(classify_stock_threshold(3), AVAILABLE)
        self.assertEqual(classify_stock_threshold(1000), AVAILABLE)

    def test_low_stock(self):
        self.assertEqual(classify_stock_threshold(1), LOW_STOCK)
        self.assertEqual(classify_stock_threshold(2), LOW_STOCK)

    def test_out_of_stock(self):
        self.assertEqual(classify_stock_threshold(0), OUT_OF_STOCK)

    def test_custom_threshold(self):
        self.assertEqual(classify_stock_threshold(5, threshold=10), LOW_STOCK)
        self.assertEqual(classify_stock_threshold(11, threshold=10), AVAILABLE)

    def test_status_presentation(self):
        self.assertEqual(AVAILABLE.message, 'In Stock')
        self.assertEqual(AVAILABLE.css_class, 'text-green-500 bg-green-100')
        self.assertEqual(LOW_STOCK.message, 'Low Stock')
        self.assertEqual(LOW_STOCK.css_class, 'text-yellow-500 bg-yellow-100')
        self.assertEqual(OUT_OF_STOCK.message, 'Out of Stock')
        self.assertEqual(OUT_OF_STOCK.css_class, 'text-red-500 bg-red-100')


class ConfiguredStockClassificationTests(SimpleTestCase):
    """classify_stock follows STOCK_STATUS_MODE"""

    @override_settings(STOCK_STATUS_MODE='threshold', LOW_STOCK_THRESHOLD=2)
    def test_threshold_mode(self):
        self.assertEqual(classify_stock(5), AVAILABLE)
        self.assertEqual(classify_stock(2), LOW_STOCK)
        self.assertEqual(classify_stock(0), OUT_OF_STOCK)

    @override_settings(STOCK_STATUS_MODE='legacy')
    def test_legacy_mode(self):
        self.assertEqual(classify_stock(5), AVAILABLE)
        self.assertEqual(classify_stock(2), AVAILABLE)
        self.assertEqual(classify_stock(0), LOW_STOCK)

    @override_settings(STOCK_STATUS_MODE='threshold', LOW_STOCK_THRESHOLD=5)
    def test_threshold_setting(self):
        self.assertEqual(classify_stock(5), LOW_STOCK)
        self.assertEqual(classify_stock(6), AVAILABLE)

    @override_settings(STOCK_STATUS_MODE='strict')
    def test_unknown_mode(self):
        with self.assertRaises(ImproperlyConfigured):
            classify_stock(1)

    @override_settings(STOCK_STATUS_MODE='legacy')
    def test_legacy_quantity_filters(self):
        self.assertEqual(stock_status_quantity_filter('available'), {'qty__gt': 0})
        self.assertEqual(stock_status_quantity_filter('low_stock'), {'qty__lte': 0})
        self.assertIsNone(stock_status_quantity_filter('out_of_stock'))

    def test_unknown_status_filter(self):
        with self.assertRaises(ValueError):
            stock_status_quantity_filter('discontinued')


class FormatPriceTests(SimpleTestCase):

    def test_grouping(self):
        self.assertEqual(format_price(1200000), '1.200.000')
        self.assertEqual(format_price(3500), '3.500')
        self.assertEqual(format_price(0), '0')
        self.assertEqual(format_price(999), '999')

    def test_decimal_input(self):
        self.assertEqual(format_price(Decimal('250000.00')), '250.000')
        self.assertEqual(format_price('1300000'), '1.300.000')

    def test_fraction_is_rounded(self):
        self.assertEqual(format_price(Decimal('1999.49')), '1.999')
        self.assertEqual(format_price(Decimal('1999.50')), '2.000')
        self.assertEqual(format_price(0.5), '1')


class ProductModelTests(TestCase):

    @override_settings(STOCK_STATUS_MODE='threshold', LOW_STOCK_THRESHOLD=2)
    def test_derived_values(self):
        product = TestDataFactory.create_product(price=Decimal('1200000'), qty=15)
        product.refresh_from_db()
        self.assertEqual(product.formatted_price, '1.200.000')
        self.assertEqual(product.stock_status, AVAILABLE)

        product.qty = 0
        self.assertEqual(product.stock_status, OUT_OF_STOCK)

    def test_str(self):
        product = TestDataFactory.create_product(name='Varminlo TKL', category='Keyboard')
        self.assertEqual(str(product), 'Varminlo TKL (Keyboard)')


@override_settings(STOCK_STATUS_MODE='threshold', LOW_STOCK_THRESHOLD=2)
class ProductAPITests(TestCase):
    """Test product endpoints and their role binding"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.mini = TestDataFactory.create_product(name='Ducky One 2 Mini', price=Decimal('1200000'), category='Keyboard', qty=15)
        self.switch = TestDataFactory.create_product(name='Cherry MX Switches speed silver', price=Decimal('3500'), category='Switch', qty=2)
        self.keycaps = TestDataFactory.create_product(name='Keycaps PBT Transparant full set', price=Decimal('200000'), category='Keycaps', qty=0)

    def test_list_requires_authentication(self):
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_customer_lists_products(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 3)

        first = response.data[0]
        self.assertEqual(first['name'], 'Ducky One 2 Mini')
        self.assertEqual(first['formatted_price'], '1.200.000')
        self.assertEqual(first['stock_status']['status'], 'available')
        self.assertEqual(first['stock_status']['message'], 'In Stock')

    def test_filter_by_stock_status(self):
        self.client.authenticate_user(self.customer)
        cases = {
            'available': ['Ducky One 2 Mini'],
            'low_stock': ['Cherry MX Switches speed silver'],
            'out_of_stock': ['Keycaps PBT Transparant full set'],
        }
        for stock_status, expected in cases.items():
            response = self.client.get('/api/v1/products/', {'stock_status': stock_status})
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertEqual([p['name'] for p in response.data], expected)

    @override_settings(STOCK_STATUS_MODE='legacy')
    def test_filter_by_stock_status_legacy(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/products/', {'stock_status': 'low_stock'})
        self.assertEqual([p['name'] for p in response.data], ['Keycaps PBT Transparant full set'])
        response = self.client.get('/api/v1/products/', {'stock_status': 'out_of_stock'})
        self.assertEqual(response.data, [])

    def test_filter_rejects_unknown_stock_status(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/products/', {'stock_status': 'discontinued'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('stock_status', response.data)

    def test_filter_by_search_and_category(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/products/', {'search': 'ducky mini'})
        self.assertEqual([p['name'] for p in response.data], ['Ducky One 2 Mini'])
        response = self.client.get('/api/v1/products/', {'category': 'keycaps'})
        self.assertEqual([p['name'] for p in response.data], ['Keycaps PBT Transparant full set'])

    def test_customer_cannot_create(self):
        self.client.authenticate_user(self.customer)
        data = {'name': 'Ducky One 3', 'price': '1500000', 'category': 'Keyboard', 'qty': 5}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(str(response.data['detail']), 'Forbidden')
        self.assertFalse(Product.objects.filter(name='Ducky One 3').exists())

    def test_admin_creates_product(self):
        self.client.authenticate_user(self.admin)
        data = {'name': 'Ducky One 3', 'price': '1500000', 'category': 'Keyboard', 'qty': 5}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['formatted_price'], '1.500.000')

        log = AuditLog.objects.get(action='create', model_name='Product')
        self.assertEqual(log.object_id, str(response.data['id']))
        self.assertEqual(log.user, self.admin)
        self.assertEqual(log.changes['name']['new'], 'Ducky One 3')

    def test_create_validation(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post(
            '/api/v1/products/', {'name': '', 'price': '-1', 'category': 'Keyboard', 'qty': -3}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('name', 'price', 'qty'):
            self.assertIn(field, response.data)

    def test_customer_reads_detail(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get(f'/api/v1/products/{self.switch.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['formatted_price'], '3.500')
        self.assertEqual(response.data['stock_status']['status'], 'low_stock')

    def test_customer_cannot_update(self):
        self.client.authenticate_user(self.customer)
        response = self.client.patch(f'/api/v1/products/{self.mini.id}/', {'qty': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.mini.refresh_from_db()
        self.assertEqual(self.mini.qty, 15)

    def test_admin_updates_product(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/products/{self.mini.id}/', {'qty': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stock_status']['status'], 'low_stock')

        log = AuditLog.objects.get(action='update', model_name='Product')
        self.assertEqual(log.changes, {'qty': {'old': '15', 'new': '1'}})

    def test_admin_deletes_product(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/products/{self.keycaps.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=self.keycaps.pk).exists())
        self.assertTrue(AuditLog.objects.filter(action='delete', object_id=str(self.keycaps.pk)).exists())

    def test_missing_product(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/products/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_categories(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/products/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, ['Keyboard', 'Keycaps', 'Switch'])


@override_settings(STOCK_STATUS_MODE='threshold', LOW_STOCK_THRESHOLD=2)
class DashboardTests(TestCase):
    """Test dashboard summary and its cache"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        TestDataFactory.create_product(price=Decimal('1200000'), category='Keyboard', qty=15)
        TestDataFactory.create_product(price=Decimal('3500'), category='Switch', qty=1)
        TestDataFactory.create_product(price=Decimal('200000'), category='Keycaps', qty=0)

    def tearDown(self):
        cache.clear()

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_summary(self):
        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_products'], 3)
        self.assertEqual(response.data['total_units'], 16)
        self.assertEqual(response.data['total_categories'], 3)
        self.assertEqual(response.data['inventory_value_formatted'], '18.003.500')
        self.assertEqual(
            response.data['stock_status_counts'],
            {'available': 1, 'low_stock': 1, 'out_of_stock': 1},
        )

    def test_summary_is_cached(self):
        get_dashboard_summary()
        self.assertIsNotNone(cache.get(DASHBOARD_CACHE_KEY))

    def test_product_save_invalidates_cache(self):
        self.assertEqual(get_dashboard_summary()['total_products'], 3)
        TestDataFactory.create_product(qty=4)
        self.assertIsNone(cache.get(DASHBOARD_CACHE_KEY))
        self.assertEqual(get_dashboard_summary()['total_products'], 4)

    def test_product_delete_invalidates_cache(self):
        get_dashboard_summary()
        Product.objects.filter(qty=0).delete()
        self.assertEqual(get_dashboard_summary()['stock_status_counts']['out_of_stock'], 0)

    def test_mode_change_rebuilds_summary(self):
        self.assertEqual(get_dashboard_summary()['stock_status_counts']['out_of_stock'], 1)
        with self.settings(STOCK_STATUS_MODE='legacy'):
            summary = get_dashboard_summary()
            self.assertEqual(summary['stock_status_mode'], 'legacy')
            self.assertEqual(
                summary['stock_status_counts'],
                {'available': 2, 'low_stock': 1, 'out_of_stock': 0},
            )
