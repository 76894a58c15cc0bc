import apps.plan_purchases.models
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Plan',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=20, unique=True)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('coverage_amount', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('price', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('benefits', models.JSONField(blank=True, default=list)),
                ('mandatory_member_count', models.PositiveIntegerField(default=4)),
                ('relation_slots', models.JSONField(default=apps.plan_purchases.models.default_relation_slots)),
                ('validity_days', models.PositiveIntegerField(default=365)),
                ('emergency_contact', models.CharField(blank=True, max_length=30)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive')], default='active', max_length=20)),
            ],
            options={
                'verbose_name': 'Plan',
                'verbose_name_plural': 'Plans',
                'db_table': 'plans',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='PlanPurchase',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('policy_number', models.CharField(max_length=30, unique=True)),
                ('subscriber_name', models.CharField(max_length=120)),
                ('subscriber_mobile', models.CharField(blank=True, max_length=15)),
                ('mandatory_member_count', models.PositiveIntegerField()),
                ('relation_slots', models.JSONField()),
                ('amount_paid', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('transaction_id', models.CharField(blank=True, max_length=50)),
                ('status', models.CharField(choices=[('active', 'Active'), ('expired', 'Expired')], default='active', max_length=20)),
                ('purchased_at', models.DateTimeField(auto_now_add=True)),
                ('valid_from', models.DateField(blank=True, null=True)),
                ('expiry_date', models.DateField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('plan', models.ForeignKey(on_delete=django.db.models.deletion.RESTRICT, related_name='purchases', to='plan_purchases.plan')),
            ],
            options={
                'verbose_name': 'Plan purchase',
                'verbose_name_plural': 'Plan purchases',
                'db_table': 'plan_purchases',
                'ordering': ['-purchased_at'],
            },
        ),
    ]
