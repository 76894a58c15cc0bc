import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('members', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ECard',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('card_unique_id', models.CharField(max_length=20, unique=True)),
                ('status', models.CharField(choices=[('pending', 'Generation pending'), ('active', 'Active')], default='pending', max_length=10)),
                ('issued_at', models.DateTimeField(auto_now_add=True)),
                ('activated_at', models.DateTimeField(blank=True, null=True)),
                ('valid_from', models.DateField()),
                ('valid_till', models.DateField()),
                ('snapshot', models.JSONField(default=dict)),
                ('member', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='ecard', to='members.member')),
            ],
            options={
                'verbose_name': 'E-Card',
                'verbose_name_plural': 'E-Cards',
                'db_table': 'ecards',
                'ordering': ['-issued_at'],
            },
        ),
    ]
