# apps/ecards/serializers.py
from rest_framework import serializers

from .models import ECard


class ECardSerializer(serializers.ModelSerializer):
    """E-Card as rendered by the E-Cards view (front and back of the card)"""

    member_id = serializers.ReadOnlyField(source='member.id')
    display_status = serializers.ReadOnlyField()
    member_name = serializers.SerializerMethodField()
    relation = serializers.SerializerMethodField()
    plan_name = serializers.SerializerMethodField()
    policy_number = serializers.SerializerMethodField()

    class Meta:
        model = ECard
        fields = [
            'id', 'member_id', 'card_unique_id', 'status', 'display_status',
            'member_name', 'relation', 'plan_name', 'policy_number',
            'issued_at', 'activated_at', 'valid_from', 'valid_till', 'snapshot',
        ]

    def get_member_name(self, obj):
        return obj.snapshot.get('member_name')

    def get_relation(self, obj):
        return obj.snapshot.get('relation')

    def get_plan_name(self, obj):
        return obj.snapshot.get('plan_name')

    def get_policy_number(self, obj):
        return obj.snapshot.get('policy_number')


class GenerateECardSerializer(serializers.Serializer):
    """Single-request run of the E-Card wizard"""

    plan_purchase_id = serializers.IntegerField()
    member_id = serializers.IntegerField()
    member_details = serializers.DictField(default=dict)
    acknowledged = serializers.BooleanField(default=False)


class AvailableMemberSerializer(serializers.Serializer):
    member_id = serializers.IntegerField()
    name = serializers.CharField(allow_blank=True)
    relation = serializers.CharField()
    lock_state = serializers.CharField()
    has_card = serializers.BooleanField()
    awaiting_card = serializers.BooleanField()
    selectable = serializers.BooleanField()
