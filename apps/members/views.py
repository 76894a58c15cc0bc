import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .enrollment import enrollment_summary
from .exceptions import EnrollmentError, ValidationFailed
from .serializers import (
    EnrollmentSummarySerializer, MemberCreateSerializer, MemberListSerializer, MemberSerializer,
)
from .services import MemberRecordService

# Logger
logger = logging.getLogger(__name__)


def error_response(exc):
    """Envelope of a domain error: {code, field, message} plus field errors"""
    body = {
        'success': False,
        'error': {'code': exc.code, 'field': exc.field, 'message': exc.message},
        'retryable': exc.retryable,
    }
    if isinstance(exc, ValidationFailed):
        body['errors'] = [error.as_dict() for error in exc.errors]
    return Response(body, status=exc.http_status)


def request_fields(request):
    data = request.data
    return data.dict() if hasattr(data, 'dict') else dict(data)


def server_error(message):
    return Response({
        'success': False,
        'error': {'code': 'server_error', 'field': None, 'message': message},
    }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def plan_members(request, plan_purchase_id):
    """
    Members of a plan purchase

    GET  /api/v1/plan-purchases/{id}/members/
    POST /api/v1/plan-purchases/{id}/members/
    {
        "relation_slot": "Spouse"
    }
    """
    try:
        if request.method == 'POST':
            serializer = MemberCreateSerializer(data=request.data)
            if not serializer.is_valid():
                return Response({
                    'success': False,
                    'error': {'code': 'validation_failed', 'field': 'relation_slot', 'message': 'Invalid data'},
                    'details': serializer.errors
                }, status=status.HTTP_400_BAD_REQUEST)

            member = MemberRecordService.create_member(
                plan_purchase_id, serializer.validated_data['relation_slot']
            )
            return Response({
                'success': True,
                'data': MemberSerializer(member).data
            }, status=status.HTTP_201_CREATED)

        members = MemberRecordService.list_members(plan_purchase_id)
        return Response({
            'success': True,
            'data': {
                'members': MemberListSerializer(members, many=True).data,
                'enrollment': EnrollmentSummarySerializer(enrollment_summary(plan_purchase_id)).data
            }
        })

    except EnrollmentError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error on members of plan purchase {plan_purchase_id}: {e}")
        return server_error('Error while processing plan members')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def plan_enrollment(request, plan_purchase_id):
    """
    Enrollment gate of a plan purchase

    GET /api/v1/plan-purchases/{id}/enrollment/
    """
    try:
        summary = enrollment_summary(plan_purchase_id)
        return Response({
            'success': True,
            'data': EnrollmentSummarySerializer(summary).data
        })
    except EnrollmentError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error computing enrollment of plan purchase {plan_purchase_id}: {e}")
        return server_error('Error while computing enrollment')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def member_detail(request, member_id):
    """
    GET /api/v1/members/{id}/
    """
    try:
        member = MemberRecordService.get_member(member_id)
        return Response({
            'success': True,
            'data': MemberSerializer(member).data
        })
    except EnrollmentError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error reading member {member_id}: {e}")
        return server_error('Error while reading member details')


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def member_draft(request, member_id):
    """
    Save partial member details without locking

    PATCH /api/v1/members/{id}/draft/
    {
        "full_name": "Asha Verma",
        "mobile": "9876543210"
    }
    """
    try:
        member = MemberRecordService.save_draft(member_id, request_fields(request))
        return Response({
            'success': True,
            'message': 'Details saved',
            'data': MemberSerializer(member).data
        })
    except EnrollmentError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error saving draft of member {member_id}: {e}")
        return server_error('Error while saving member details')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def member_lock(request, member_id):
    """
    Validate every mandatory field and lock the member

    POST /api/v1/members/{id}/lock/
    {
        "full_name": "Asha Verma",
        "date_of_birth": "1990-04-12",
        ...
    }
    """
    try:
        member = MemberRecordService.commit_and_lock(member_id, request_fields(request))
        return Response({
            'success': True,
            'message': 'Member details confirmed and locked',
            'data': MemberSerializer(member).data
        })
    except EnrollmentError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error locking member {member_id}: {e}")
        return server_error('Error while locking member details')
