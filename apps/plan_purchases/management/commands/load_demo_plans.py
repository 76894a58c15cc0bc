from django.core.management.base import BaseCommand
from apps.plan_purchases.models import Plan


class Command(BaseCommand):
    help = 'Loads the base HealthMitra plans'

    def handle(self, *args, **options):
        """Create the catalogue plans"""

        # Family plan: four mandatory members
        family, created = Plan.objects.get_or_create(
            code='FAMILY',
            defaults={
                'name': 'Gold Family Health Plan',
                'description': 'Cashless hospitalisation and OPD cover for a family of four',
                'coverage_amount': 500000,
                'price': 14999,
                'benefits': [
                    'Cashless hospitalisation at network hospitals',
                    'Free annual health check-up',
                    'OPD consultations up to 12 per year',
                    '24x7 tele-consultation',
                ],
                'mandatory_member_count': 4,
                'relation_slots': ['Self', 'Spouse', 'Child1', 'Child2'],
                'validity_days': 365,
                'emergency_contact': '+91 1800 123 4567',
                'status': 'active'
            }
        )
        self.stdout.write(f"Plan FAMILY {'created' if created else 'already exists'}")

        # Couple plan: two mandatory members
        couple, created = Plan.objects.get_or_create(
            code='COUPLE',
            defaults={
                'name': 'Silver Couple Health Plan',
                'description': 'Hospitalisation cover for two adults',
                'coverage_amount': 300000,
                'price': 8999,
                'benefits': [
                    'Cashless hospitalisation at network hospitals',
                    'Discounted diagnostics',
                ],
                'mandatory_member_count': 2,
                'relation_slots': ['Self', 'Spouse'],
                'validity_days': 365,
                'status': 'active'
            }
        )
        self.stdout.write(f"Plan COUPLE {'created' if created else 'already exists'}")

        self.stdout.write(
            self.style.SUCCESS('HealthMitra plans loaded')
        )
