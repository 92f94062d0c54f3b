"""
Management command to reset the catalog and users to the baseline seed data
Usage: python manage.py seed [--admin]
"""
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from keyshop.catalog.dashboard_cache import invalidate_dashboard_cache
from keyshop.catalog.models import Product
from keyshop.core.models import Role
from keyshop.core.utils import create_audit_log

User = get_user_model()

SEED_USER = {
    'name': 'Test User',
    'email': 'test@example.com',
    'username': 'test@example.com',
}
SEED_USER_PASSWORD = 'password'

SEED_PRODUCTS = [
    {'name': 'Ducky One 2 Mini', 'price': Decimal('1200000'), 'category': 'Keyboard', 'qty': 15},
    {'name': 'Varminlo TKL', 'price': Decimal('1300000'), 'category': 'Keyboard', 'qty': 10},
    {'name': 'Ducky One 2 TKL Midnight', 'price': Decimal('1100000'), 'category': 'Keyboard', 'qty': 15},
    {'name': 'Cherry MX Switches speed silver', 'price': Decimal('3500'), 'category': 'Switch', 'qty': 1000},
    {'name': 'Keycaps PBT Sunshine full set', 'price': Decimal('250000'), 'category': 'Keycaps', 'qty': 50},
    {'name': 'Keycaps PBT Transparant full set', 'price': Decimal('200000'), 'category': 'Keycaps', 'qty': 0},
]


class Command(BaseCommand):
    help = 'Delete all products and users, then insert the baseline user and product catalog'

    def add_arguments(self, parser):
        parser.add_argument(
            '--admin',
            action='store_true',
            help='Give the seeded user the admin role',
        )

    def handle(self, *args, **options):
        role = Role.ADMIN if options['admin'] else Role.CUSTOMER

        try:
            with transaction.atomic():
                product_count = Product.objects.count()
                user_count = User.objects.count()

                Product.objects.all().delete()
                User.objects.all().delete()
                self.stdout.write(f'Cleared {product_count} products and {user_count} users')

                user = User(**SEED_USER, role=role)
                user.set_password(SEED_USER_PASSWORD)
                user.save()
                self.stdout.write(self.style.SUCCESS(f'  ✓ Created user: {user.name} <{user.email}> ({user.role})'))

                products = Product.objects.bulk_create([Product(**data) for data in SEED_PRODUCTS])
                for product in products:
                    self.stdout.write(self.style.SUCCESS(f'  ✓ Created product: {product.name}'))

                create_audit_log(
                    action='seed',
                    model_name='Product',
                    object_id='*',
                    object_name='Seed catalog',
                    changes={'products': len(products), 'users': 1},
                )
        except Exception as e:
            self.stdout.write(self.style.ERROR(f'\n❌ Error during seeding: {str(e)}'))
            raise

        invalidate_dashboard_cache()

        self.stdout.write(self.style.SUCCESS(
            f'\nSeeded {len(SEED_PRODUCTS)} products and 1 user'
        ))
