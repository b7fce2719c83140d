# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Customer notifications, dispatched through Celery.

    Called only after the order transaction has committed. A failed dispatch
    is logged and dropped, it never undoes the order.
    """

    @staticmethod
    def send_order_notification(user_id: int, order_id: int) -> bool:
        try:
            send_order_notification_task.delay(user_id, order_id)
            return True
        except Exception as e:
            logger.warning(f"Could not enqueue notification for order {order_id}: {e}")
            return False

    @staticmethod
    def send_status_notification(user_id: int, order_id: int, status: str) -> bool:
        try:
            send_status_notification_task.delay(user_id, order_id, status)
            return True
        except Exception as e:
            logger.warning(f"Could not enqueue status notification for order {order_id}: {e}")
            return False


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int):
    # a real deployment would hand this to an email/SMS gateway
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} has been placed")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}


@celery_app.task(name="storefront.services.notification_service.send_status_notification_task")
def send_status_notification_task(user_id: int, order_id: int, status: str):
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} is now {status}")
    return {"user_id": user_id, "order_id": order_id, "order_status": status, "status": "sent"}
