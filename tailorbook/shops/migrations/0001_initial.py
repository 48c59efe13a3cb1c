import django.core.validators
import django.db.models.deletion
import tailorbook.shops.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Shop',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('shop_name', models.CharField(max_length=200)),
                ('owner_name', models.CharField(max_length=200)),
                ('phone_number', models.CharField(max_length=30, validators=[django.core.validators.RegexValidator(message='Enter a valid phone number (at least 10 digits, may start with +).', regex='^[+]?[0-9\\s\\-()]{10,}$')])),
                ('address', models.TextField()),
                ('logo', models.ImageField(blank=True, null=True, upload_to=tailorbook.shops.models.shop_logo_path)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='shop', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'shops',
                'ordering': ['shop_name'],
            },
        ),
    ]
