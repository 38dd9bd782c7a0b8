from django.conf import settings
from django.db import migrations, models
import django.core.serializers.json
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ActivityLog',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('action', models.CharField(choices=[('create', 'Create'), ('update', 'Update'), ('delete', 'Delete'), ('deactivate', 'Deactivate'), ('import', 'Import')], max_length=12)),
                ('entity_type', models.CharField(choices=[('catalog', 'Catalog'), ('general', 'General'), ('concept', 'Concept'), ('subconcept', 'Subconcept'), ('description', 'Description'), ('provider', 'Provider'), ('transaction', 'Transaction'), ('payment', 'Payment'), ('role_permissions', 'Role permissions')], max_length=20)),
                ('entity_id', models.CharField(blank=True, max_length=64)),
                ('user_name', models.CharField(blank=True, max_length=255)),
                ('details', models.CharField(blank=True, max_length=500)),
                ('data', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='activity_entries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'activity_log',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['action', 'created_at'], name='activity_lo_action_3f1a2c_idx'),
                    models.Index(fields=['entity_type', 'created_at'], name='activity_lo_entity__8b7d4e_idx'),
                    models.Index(fields=['user', 'created_at'], name='activity_lo_user_id_c25e90_idx'),
                ],
            },
        ),
    ]
