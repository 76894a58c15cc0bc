from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.members.services import MemberRecordService
from apps.plan_purchases.models import Plan, PlanPurchase


class Command(BaseCommand):
    help = 'Creates demo plan purchases with their empty member slots'

    @transaction.atomic
    def handle(self, *args, **options):
        """Create demo purchases and open them for enrollment"""

        if not Plan.objects.filter(code__in=['FAMILY', 'COUPLE']).exists():
            call_command('load_demo_plans', stdout=self.stdout)

        demo_purchases = [
            {
                'plan_code': 'FAMILY',
                'subscriber_name': 'Rahul Sharma',
                'subscriber_mobile': '9876543210',
                'amount_paid': 14999,
                'transaction_id': 'TXN-DEMO-0001',
            },
            {
                'plan_code': 'COUPLE',
                'subscriber_name': 'Priya Nair',
                'subscriber_mobile': '9123456780',
                'amount_paid': 8999,
                'transaction_id': 'TXN-DEMO-0002',
            },
        ]

        for data in demo_purchases:
            plan = Plan.objects.get(code=data.pop('plan_code'))
            purchase = PlanPurchase.objects.create(plan=plan, **data)
            members = MemberRecordService.create_slot_members(purchase.pk)
            self.stdout.write(
                f"Purchase {purchase.policy_number} created with {len(members)} member slots"
            )

        self.stdout.write(
            self.style.SUCCESS('Demo plan purchases created')
        )
