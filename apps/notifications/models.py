from django.db import models


class NotificationSettings(models.Model):
    """
    Single row holding notification recipients.

    admin_emails get payment notifications; accountant_emails get new
    expense notifications.
    """

    SINGLETON_ID = 1

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_ID, editable=False)
    admin_emails = models.JSONField(default=list, blank=True)
    accountant_emails = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'notification_settings'
        verbose_name = 'notification settings'
        verbose_name_plural = 'notification settings'

    def __str__(self):
        return 'Notification settings'

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_ID
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(pk=cls.SINGLETON_ID)
        return obj
