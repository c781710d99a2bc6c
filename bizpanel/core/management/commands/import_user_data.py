"""
Management command to load products and orders exported from browser storage
"""
import json
import os
from django.core.management.base import BaseCommand, CommandError
from bizpanel.core.models import User
from bizpanel.core.storage import SnapshotError, import_user_data, products_key, orders_key


class Command(BaseCommand):
    help = "Replaces a user's products and orders with a products_<userId> / orders_<userId> JSON dump"

    def add_arguments(self, parser):
        parser.add_argument('json_file', type=str, help='Path to the JSON dump')
        parser.add_argument(
            '--user',
            type=str,
            required=True,
            help='Username (email) that receives the data',
        )
        parser.add_argument(
            '--source-id',
            type=str,
            help='User id used in the dump keys, when it differs from the target user',
        )
        parser.add_argument(
            '--fresh-ids',
            action='store_true',
            help='Give every imported product and order a new id (implied by --source-id)',
        )

    def handle(self, *args, **options):
        json_file = options['json_file']
        if not os.path.exists(json_file):
            raise CommandError(f"JSON file not found at {json_file}")

        user = User.objects.filter(username__iexact=options['user']).first()
        if user is None:
            raise CommandError(f"User not found: {options['user']}")

        with open(json_file, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise CommandError(f"Invalid JSON: {e}")
        if not isinstance(data, dict):
            raise CommandError("Expected a JSON object keyed by products_<userId> / orders_<userId>")

        source_id = options.get('source_id')
        fresh_ids = options['fresh_ids']
        if source_id:
            # Re-key the dump onto the target user
            data = {
                products_key(user.pk): data.get(products_key(source_id)),
                orders_key(user.pk): data.get(orders_key(source_id)),
            }
            data = {key: value for key, value in data.items() if value is not None}
            # The source rows may still exist, so their ids cannot be reused
            fresh_ids = fresh_ids or str(source_id) != str(user.pk)

        try:
            result = import_user_data(user, data, fresh_ids=fresh_ids)
        except SnapshotError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS(
            f"✓ Imported {result['products']} products and {result['orders']} orders for {user.username}"
        ))
