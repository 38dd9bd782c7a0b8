from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ('accounts', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='RolePermission',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('role', models.CharField(choices=[('administrativo', 'Administrativo'), ('contador', 'Contador'), ('director_general', 'Director general')], max_length=20)),
                ('capability', models.CharField(choices=[('manage_transactions', 'manage_transactions'), ('manage_catalogs', 'manage_catalogs'), ('delete_catalog_items', 'delete_catalog_items'), ('delete_transactions', 'delete_transactions'), ('delete_payments', 'delete_payments'), ('manage_settings', 'manage_settings'), ('view_reports', 'view_reports')], max_length=30)),
                ('granted', models.BooleanField()),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='role_permission_changes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'role_permissions',
                'ordering': ['role', 'capability'],
                'constraints': [models.UniqueConstraint(fields=('role', 'capability'), name='unique_role_capability')],
            },
        ),
    ]
