from .channels import EmailService, RealtimeService, SMSService
from .notifications import NotificationService, notification_service

__all__ = [
    'EmailService',
    'RealtimeService',
    'SMSService',
    'NotificationService',
    'notification_service',
]
