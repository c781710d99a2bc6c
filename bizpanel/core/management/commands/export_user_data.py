"""
Management command to export users' products and orders in the browser storage format
"""
import json
from django.core.management.base import BaseCommand, CommandError
from bizpanel.core.models import User
from bizpanel.core.storage import export_user_data


class Command(BaseCommand):
    help = "Exports products_<userId> / orders_<userId> JSON arrays for one or all users"

    def add_arguments(self, parser):
        parser.add_argument(
            '--user',
            type=str,
            help='Username (email) to export; all users when omitted',
        )
        parser.add_argument(
            '--output',
            type=str,
            help='Write the JSON to this file instead of stdout',
        )
        parser.add_argument(
            '--indent',
            type=int,
            default=2,
            help='JSON indentation (default: 2)',
        )

    def handle(self, *args, **options):
        username = options.get('user')
        output = options.get('output')

        if username:
            users = User.objects.filter(username__iexact=username)
            if not users.exists():
                raise CommandError(f"User not found: {username}")
        else:
            users = User.objects.all().order_by('date_joined')

        data = {}
        for user in users:
            data.update(export_user_data(user))

        content = json.dumps(data, indent=options['indent'], ensure_ascii=False)

        if output:
            with open(output, 'w', encoding='utf-8') as f:
                f.write(content)
            self.stdout.write(self.style.SUCCESS(f"✓ Exported {users.count()} users to {output}"))
        else:
            self.stdout.write(content)
