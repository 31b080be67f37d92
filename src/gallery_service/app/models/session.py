from tortoise import fields
from tortoise.models import Model


class UserSession(Model):
    token = fields.CharField(max_length=128, primary_key=True)
    user_id = fields.IntField(db_index=True)
    expires_at = fields.DatetimeField()

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "user_sessions"

    def __str__(self) -> str:
        return f"<UserSession(user_id={self.user_id}, expires_at={self.expires_at})>"
