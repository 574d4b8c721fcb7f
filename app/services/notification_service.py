# app/services/notification_service.py
from kombu.exceptions import OperationalError

from app.celery_worker import celery_app
from app.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień o zamówieniach.
    Używa Celery; wywoływany dopiero po commicie, poza transakcją.
    """

    @staticmethod
    def send_order_notification(student_id: int, order_id: int, status: str) -> bool:
        """
        Powiadamia druga strone zamowienia o nowym statusie.
        Zmiana jest juz zapisana, wiec niedostepny broker tylko logujemy.
        """
        try:
            send_order_notification_task.delay(student_id, order_id, status)
        except OperationalError as e:
            logger.warning(f"Failed to enqueue notification for order {order_id} ({status}): {e}")
            return False
        return True


@celery_app.task(name="app.services.notification_service.send_order_notification_task")
def send_order_notification_task(student_id: int, order_id: int, status: str):
    """
    Celery task - w prawdziwym systemie wysłałby email/push.
    Teraz tylko loguje.
    """
    logger.info(f"[NOTIFICATION] Student {student_id}: Order {order_id} is now {status}")

    return {"student_id": student_id, "order_id": order_id, "status": status}
