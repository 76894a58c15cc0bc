import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.members.exceptions import EnrollmentError
from apps.members.serializers import MemberSerializer
from apps.members.views import error_response, server_error
from .filters import ECardFilter
from .serializers import AvailableMemberSerializer, ECardSerializer, GenerateECardSerializer
from .services import CardIssuanceService
from .wizard import ECardWizard

# Logger
logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_member_card(request, member_id):
    """
    Request the E-Card of a locked member

    POST /api/v1/members/{id}/ecard/
    """
    try:
        card = CardIssuanceService.request_card(member_id)
        return Response({
            'success': True,
            'message': 'E-Card requested, generation pending',
            'data': ECardSerializer(card).data
        }, status=status.HTTP_201_CREATED)
    except EnrollmentError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error requesting E-Card for member {member_id}: {e}")
        return server_error('Error while requesting the E-Card')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def card_detail(request, card_id):
    """
    GET /api/v1/ecards/{id}/
    """
    try:
        card = CardIssuanceService.get_card(card_id)
        return Response({
            'success': True,
            'data': ECardSerializer(card).data
        })
    except EnrollmentError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error reading E-Card {card_id}: {e}")
        return server_error('Error while reading the E-Card')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def confirm_card(request, card_id):
    """
    Confirm a pending E-Card (manual confirmation mode)

    POST /api/v1/ecards/{id}/confirm/
    """
    try:
        card = CardIssuanceService.confirm_card(card_id)
        return Response({
            'success': True,
            'message': f'E-Card {card.card_unique_id} is active',
            'data': ECardSerializer(card).data
        })
    except EnrollmentError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error confirming E-Card {card_id}: {e}")
        return server_error('Error while confirming the E-Card')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def plan_cards(request, plan_purchase_id):
    """
    E-Cards issued under a plan purchase

    GET /api/v1/plan-purchases/{id}/ecards/?status=active&relation=Self
    """
    try:
        filterset = ECardFilter(request.GET, queryset=CardIssuanceService.list_cards(plan_purchase_id))
        if not filterset.is_valid():
            return Response({
                'success': False,
                'error': {'code': 'validation_failed', 'field': None, 'message': 'Invalid filters'},
                'details': filterset.errors.get_json_data()
            }, status=status.HTTP_400_BAD_REQUEST)

        data = ECardSerializer(filterset.qs, many=True).data
        return Response({
            'success': True,
            'data': {
                'total': len(data),
                'cards': data
            }
        })
    except EnrollmentError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error listing E-Cards of plan purchase {plan_purchase_id}: {e}")
        return server_error('Error while listing E-Cards')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def available_members(request, plan_purchase_id):
    """
    Members offered by the wizard's first step

    GET /api/v1/plan-purchases/{id}/ecards/available-members/
    """
    try:
        choices = ECardWizard(plan_purchase_id=plan_purchase_id).available_members()
        data = AvailableMemberSerializer(
            [
                dict(vars(choice), selectable=choice.selectable, awaiting_card=choice.awaiting_card)
                for choice in choices
            ],
            many=True
        ).data
        return Response({
            'success': True,
            'data': {
                'members': data,
                'selectable': sum(1 for choice in choices if choice.selectable)
            }
        })
    except EnrollmentError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error listing wizard members of plan purchase {plan_purchase_id}: {e}")
        return server_error('Error while listing members')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def generate_card(request):
    """
    Run the E-Card wizard in one request: select, capture, review, commit

    POST /api/v1/ecards/generate/
    {
        "plan_purchase_id": 12,
        "member_id": 48,
        "member_details": {"full_name": "Asha Verma", ...},
        "acknowledged": true
    }
    """
    serializer = GenerateECardSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({
            'success': False,
            'error': {'code': 'validation_failed', 'field': None, 'message': 'Invalid data'},
            'details': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    wizard = ECardWizard(plan_purchase_id=data['plan_purchase_id'])

    try:
        wizard.select_member(data['member_id'])
        wizard.capture(data['member_details'])
        wizard.advance_to_review()
        wizard.acknowledge(data['acknowledged'])
        result = wizard.commit()
    except EnrollmentError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error generating E-Card for member {data['member_id']}: {e}")
        return server_error('Error while generating the E-Card')

    if not result.issued:
        # Member is locked; only the card request failed
        error = result.issuance_error
        return Response({
            'success': False,
            'stage': 'card_issuance',
            'member_locked': True,
            'error': error.as_dict(),
            'retryable': error.retryable,
            'data': {'member': MemberSerializer(result.member).data}
        }, status=error.http_status)

    return Response({
        'success': True,
        'message': 'Member details locked and E-Card requested',
        'data': {
            'member': MemberSerializer(result.member).data,
            'card': ECardSerializer(result.card).data
        }
    }, status=status.HTTP_201_CREATED)
