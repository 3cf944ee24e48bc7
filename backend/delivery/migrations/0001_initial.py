import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="DriverLocation",
            fields=[
                ("driver", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name="location", serialize=False, to=settings.AUTH_USER_MODEL)),
                ("lat", models.FloatField()),
                ("lng", models.FloatField()),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
    ]
