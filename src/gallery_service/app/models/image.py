from tortoise import fields
from tortoise.models import Model

# Upper bound of the IntField primary key
MAX_IMAGE_ID = 2**31 - 1

# 9x9 components: size flag, max AC, 4-char DC and 80 two-char ACs
MAX_BLURHASH_LENGTH = 166


class Image(Model):
    id = fields.IntField(primary_key=True)
    original_filename = fields.CharField(
        max_length=255, null=True, description="Filename as uploaded by user"
    )
    width = fields.IntField(description="Original width in pixels")
    height = fields.IntField(description="Original height in pixels")
    blurhash = fields.CharField(
        max_length=MAX_BLURHASH_LENGTH,
        description="BlurHash placeholder for instant preview",
    )

    thumbnail_data = fields.BinaryField(description="Square WebP thumbnail")
    image_data = fields.BinaryField(description="Full-size WebP rendition")

    original_data = fields.BinaryField(
        null=True, description="Untouched upload for lossless downloads"
    )
    original_mime_type = fields.CharField(max_length=50, null=True)
    original_size = fields.BigIntField(null=True, description="Upload size in bytes")

    is_deleted = fields.BooleanField(default=False, db_index=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "images"

    def __str__(self) -> str:
        return f"<Image(id={self.id}, size={self.width}x{self.height}, deleted={self.is_deleted})>"
