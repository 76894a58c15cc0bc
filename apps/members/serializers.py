# apps/members/serializers.py
from rest_framework import serializers

from .models import Member


class MemberSerializer(serializers.ModelSerializer):
    """Full member record as shown by the purchases and member panels"""

    card_id = serializers.ReadOnlyField()
    has_card = serializers.ReadOnlyField()
    is_locked = serializers.ReadOnlyField()

    class Meta:
        model = Member
        fields = [
            'id', 'plan_purchase', 'relation_slot',
            'full_name', 'date_of_birth', 'gender', 'blood_group', 'mobile', 'email',
            'height_cm', 'weight_kg', 'medical_conditions',
            'nominee_name', 'nominee_relation',
            'aadhaar_number', 'pan_number', 'address', 'city', 'state', 'pincode',
            'lock_state', 'is_locked', 'locked_at', 'card_id', 'has_card',
            'created_at', 'updated_at',
        ]


class MemberListSerializer(serializers.ModelSerializer):
    """Light member row for lists"""

    card_id = serializers.ReadOnlyField()
    has_card = serializers.ReadOnlyField()

    class Meta:
        model = Member
        fields = [
            'id', 'relation_slot', 'full_name', 'date_of_birth', 'gender',
            'lock_state', 'card_id', 'has_card',
        ]


class MemberCreateSerializer(serializers.Serializer):
    relation_slot = serializers.CharField(max_length=30)


class EnrollmentSummarySerializer(serializers.Serializer):
    plan_purchase_id = serializers.IntegerField()
    policy_number = serializers.CharField()
    locked_members = serializers.IntegerField()
    mandatory_member_count = serializers.IntegerField()
    is_fully_enrolled = serializers.BooleanField()
    progress = serializers.FloatField()
    next_unlocked_slot = serializers.CharField(allow_null=True)
