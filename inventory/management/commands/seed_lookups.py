from django.conf import settings
from django.core.management.base import BaseCommand

from inventory.models import Size, Color
from store.models import StoreSettings


class Command(BaseCommand):
    help = 'Creates the default sizes, colors and store settings if they do not exist'

    def handle(self, *args, **kwargs):
        config = settings.STORE_CONFIG

        created_count = 0
        for position, size_name in enumerate(config['DEFAULT_SIZES'], start=1):
            size, created = Size.objects.get_or_create(name=size_name, defaults={'sort_order': position})
            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ Created size: {size_name}'))
                created_count += 1
            else:
                self.stdout.write(f'- Size already exists: {size_name}')

        for position, (color_name, hex_code) in enumerate(config['DEFAULT_COLORS'].items(), start=1):
            color, created = Color.objects.get_or_create(
                name=color_name,
                defaults={'hex_code': hex_code, 'sort_order': position},
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ Created color: {color_name} ({hex_code})'))
                created_count += 1
            else:
                self.stdout.write(f'- Color already exists: {color_name}')

        store = StoreSettings.load()

        self.stdout.write(self.style.SUCCESS(f'\nSizes: {Size.objects.count()} | Colors: {Color.objects.count()}'))
        self.stdout.write(self.style.SUCCESS(f'Created {created_count} new lookups'))
        self.stdout.write(self.style.SUCCESS(f'Store settings ready: {store.store_name}'))
