import uuid

import django.db.models.deletion
import django.utils.timezone
import users.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
        ("restaurants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("email", models.EmailField(max_length=254, unique=True, verbose_name="email address")),
                ("name", models.CharField(blank=True, max_length=150, verbose_name="name")),
                ("phone_number", models.CharField(blank=True, max_length=20, null=True, verbose_name="phone number")),
                ("role", models.CharField(choices=[("customer", "Customer"), ("driver", "Driver"), ("admin", "Restaurant Admin"), ("super_admin", "Super Admin")], default="customer", max_length=20, verbose_name="role")),
                ("push_token", models.CharField(blank=True, max_length=255, verbose_name="push token")),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("restaurant", models.ForeignKey(blank=True, help_text="The restaurant this admin manages.", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="staff", to="restaurants.restaurant")),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["role", "is_active"], name="user_role_active_idx"),
                    models.Index(fields=["restaurant", "role"], name="user_restaurant_role_idx"),
                ],
            },
            managers=[
                ("objects", users.models.UserManager()),
            ],
        ),
    ]
