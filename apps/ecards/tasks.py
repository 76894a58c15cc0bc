# apps/ecards/tasks.py

from celery import shared_task
from celery.utils.log import get_task_logger
from django.conf import settings
from django.utils import timezone
from datetime import timedelta

from .models import CardStatus, ECard
from .services import CardIssuanceService
from apps.members.exceptions import NotFound

logger = get_task_logger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=30)
def generate_ecard(self, card_id):
    """
    Finalize a requested E-Card and move it from pending to active.

    Queued by CardIssuanceService.request_card once the card row is committed.
    """
    try:
        card = CardIssuanceService.confirm_card(card_id)
    except NotFound:
        logger.warning(f"E-Card {card_id} no longer exists, nothing to confirm")
        return {'success': False, 'card_id': card_id}
    except Exception as e:
        logger.error(f"Error confirming E-Card {card_id}: {e}")
        raise self.retry(exc=e)

    return {'success': True, 'card_id': card.pk, 'status': card.status}


@shared_task(bind=True)
def confirm_stale_pending_cards(self):
    """
    Periodic task re-driving cards stuck in pending.

    A card older than the grace period whose generate_ecard task was lost
    (worker restart, broker outage) is confirmed here.
    """
    grace = timedelta(minutes=settings.ECARD['PENDING_GRACE_MINUTES'])
    stale = ECard.objects.filter(
        status=CardStatus.PENDING,
        issued_at__lte=timezone.now() - grace,
    )

    logger.info(f"{stale.count()} pending E-Cards to confirm")

    confirmed = 0
    for card in stale:
        try:
            CardIssuanceService.confirm_card(card.pk)
            confirmed += 1
        except NotFound:
            logger.warning(f"E-Card {card.pk} disappeared during confirmation")

    logger.info(f"Pending E-Card sweep finished - {confirmed} confirmed")
    return {'success': True, 'confirmed': confirmed}
