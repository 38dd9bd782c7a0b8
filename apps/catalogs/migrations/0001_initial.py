import uuid
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='General',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('type', models.CharField(choices=[('entrada', 'Entrada'), ('salida', 'Salida'), ('ambos', 'Ambos')], max_length=10)),
            ],
            options={
                'db_table': 'catalog_generals',
                'ordering': ['name'],
                'abstract': False,
                'indexes': [models.Index(fields=['type', 'is_active'], name='catalog_gen_type_1c3e0a_idx')],
            },
        ),
        migrations.CreateModel(
            name='Provider',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('rfc', models.CharField(blank=True, max_length=13)),
                ('contact_name', models.CharField(blank=True, max_length=200)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('bank_accounts', models.JSONField(blank=True, default=list)),
            ],
            options={
                'db_table': 'catalog_providers',
                'ordering': ['name'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='Concept',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('type', models.CharField(choices=[('entrada', 'Entrada'), ('salida', 'Salida'), ('ambos', 'Ambos')], max_length=10)),
                ('general', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='concepts', to='catalogs.general')),
            ],
            options={
                'db_table': 'catalog_concepts',
                'ordering': ['name'],
                'abstract': False,
                'indexes': [models.Index(fields=['general', 'is_active'], name='catalog_con_general_5d2b91_idx')],
            },
        ),
        migrations.CreateModel(
            name='Subconcept',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('concept', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='subconcepts', to='catalogs.concept')),
            ],
            options={
                'db_table': 'catalog_subconcepts',
                'ordering': ['name'],
                'abstract': False,
                'indexes': [models.Index(fields=['concept', 'is_active'], name='catalog_sub_concept_8f4a27_idx')],
            },
        ),
    ]
