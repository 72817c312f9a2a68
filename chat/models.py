from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL

MAX_MESSAGE_LENGTH = 2000


class Message(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="messages")
    content = models.TextField(max_length=MAX_MESSAGE_LENGTH)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ("created_at", "id")

    def __str__(self):
        return f"Message {self.id} by {self.user_id}: {self.content[:50]}"
