from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='StoreSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('store_name', models.CharField(max_length=200)),
                ('address', models.TextField(blank=True)),
                ('phone', models.CharField(blank=True, max_length=32)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('currency_symbol', models.CharField(default='₹', max_length=8)),
                ('tax_percentage', models.DecimalField(
                    decimal_places=2,
                    default=Decimal('0.00'),
                    max_digits=5,
                    validators=[
                        django.core.validators.MinValueValidator(Decimal('0')),
                        django.core.validators.MaxValueValidator(Decimal('100')),
                    ],
                )),
                ('low_stock_threshold', models.PositiveIntegerField(default=10)),
                ('whatsapp_channel', models.URLField(blank=True)),
                ('instagram_page', models.URLField(blank=True)),
                ('whatsapp_tagline', models.CharField(blank=True, max_length=200)),
                ('instagram_tagline', models.CharField(blank=True, max_length=200)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Store settings',
                'verbose_name_plural': 'Store settings',
            },
        ),
    ]
