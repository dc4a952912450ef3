import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Tierlist',
            fields=[
                ('uuid', models.CharField(help_text='Canonical UUID string (with dashes)', max_length=36, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
            ],
            options={
                'verbose_name': 'Tierlist',
                'verbose_name_plural': 'Tierlists',
                'db_table': 'tierlists',
                'constraints': [models.CheckConstraint(condition=models.Q(('name', ''), _negated=True), name='tierlists_name_not_empty')],
            },
        ),
        migrations.CreateModel(
            name='Tier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('order', models.IntegerField(help_text='Position of the tier within its tierlist')),
                ('tierlist', models.ForeignKey(db_column='tierlist_uuid', on_delete=django.db.models.deletion.CASCADE, related_name='tiers', to='tierlists.tierlist')),
            ],
            options={
                'verbose_name': 'Tier',
                'verbose_name_plural': 'Tiers',
                'db_table': 'tiers',
                'ordering': ['order', 'id'],
                'indexes': [models.Index(fields=['tierlist', 'order'], name='tiers_tierlist_order_idx')],
            },
        ),
        migrations.CreateModel(
            name='Entry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('file_key', models.CharField(help_text='Blob key without prefix: <uuid>.<ext>', max_length=255, unique=True)),
                ('tierlist', models.ForeignKey(db_column='tierlist_uuid', on_delete=django.db.models.deletion.CASCADE, related_name='entries', to='tierlists.tierlist')),
                ('tier', models.ForeignKey(blank=True, db_column='tier_id', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='entries', to='tierlists.tier')),
            ],
            options={
                'verbose_name': 'Entry',
                'verbose_name_plural': 'Entries',
                'db_table': 'entries',
                'ordering': ['id'],
                'indexes': [models.Index(fields=['tierlist', 'tier'], name='entries_tierlist_tier_idx')],
            },
        ),
    ]
