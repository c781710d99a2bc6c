"""
Management command to seed mock customers, products and orders
"""
from django.core.management.base import BaseCommand, CommandError
from bizpanel.core.models import User
from bizpanel.core.mock_data import ensure_customers, initialize_user_data


class Command(BaseCommand):
    help = "Seeds the mock customers and each user's starter products and orders (once per user)"

    def add_arguments(self, parser):
        parser.add_argument(
            '--user',
            type=str,
            help='Username (email) to seed; all users when omitted',
        )

    def handle(self, *args, **options):
        username = options.get('user')

        self.stdout.write(self.style.SUCCESS("================================================================================"))
        self.stdout.write(self.style.SUCCESS("SEEDING DEMO DATA"))
        self.stdout.write(self.style.SUCCESS("================================================================================"))

        customers = ensure_customers()
        self.stdout.write(f"Mock customers available: {len(customers)}")

        if username:
            users = User.objects.filter(username__iexact=username)
            if not users.exists():
                raise CommandError(f"User not found: {username}")
        else:
            users = User.objects.all().order_by('date_joined')

        products_created = 0
        orders_created = 0
        for user in users:
            result = initialize_user_data(user)
            products_created += result['products_created']
            orders_created += result['orders_created']
            if result['products_created'] or result['orders_created']:
                self.stdout.write(self.style.SUCCESS(
                    f"  ✓ {user.username}: {result['products_created']} products, {result['orders_created']} orders"
                ))
            else:
                self.stdout.write(self.style.WARNING(f"  ⊘ Skipped (already seeded): {user.username}"))

        self.stdout.write(self.style.SUCCESS("\n================================================================================"))
        self.stdout.write(self.style.SUCCESS("SUMMARY"))
        self.stdout.write(self.style.SUCCESS("================================================================================"))
        self.stdout.write(f"Products Created: {products_created}")
        self.stdout.write(f"Orders Created: {orders_created}")
        self.stdout.write(self.style.SUCCESS("================================================================================"))
