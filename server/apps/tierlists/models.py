"""Database models for tierlists app."""

from typing import ClassVar, Final, final, override

from django.db import models

# Constants for field max lengths
_UUID_MAX_LENGTH: Final = 36
_NAME_MAX_LENGTH: Final = 255
_FILE_KEY_MAX_LENGTH: Final = 255


@final
class Tierlist(models.Model):
    """Named ranking board.

    Owns an ordered list of tiers and the entries that are not assigned
    to any tier yet. Never mutated after creation, only its children are.
    """

    # Stored as text so raw JSON aggregation emits the canonical form
    uuid = models.CharField(
        primary_key=True,
        max_length=_UUID_MAX_LENGTH,
        help_text='Canonical UUID string (with dashes)',
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
    )

    class Meta:
        """Model metadata."""

        db_table = 'tierlists'
        verbose_name = 'Tierlist'  # type: ignore[mutable-override]
        verbose_name_plural = 'Tierlists'  # type: ignore[mutable-override]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.CheckConstraint(
                condition=~models.Q(name=''),
                name='tierlists_name_not_empty',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.name} ({self.uuid})'


@final
class Tier(models.Model):
    """Ordered bucket within exactly one tierlist.

    Order values are assigned sequentially on creation and are not
    kept unique afterwards.
    """

    tierlist = models.ForeignKey(
        Tierlist,
        on_delete=models.CASCADE,
        related_name='tiers',
        db_column='tierlist_uuid',
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
    )

    order = models.IntegerField(
        help_text='Position of the tier within its tierlist',
    )

    class Meta:
        """Model metadata."""

        db_table = 'tiers'
        verbose_name = 'Tier'  # type: ignore[mutable-override]
        verbose_name_plural = 'Tiers'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['order', 'id']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['tierlist', 'order'],
                name='tiers_tierlist_order_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.tierlist_id}:{self.name}'


@final
class Entry(models.Model):
    """Metadata record for one uploaded image.

    The image bytes live in object storage under ``images/<file_key>``.
    A null tier means the entry sits in its tierlist's unassigned set.
    The tier reference is the only field changed after creation.
    """

    tierlist = models.ForeignKey(
        Tierlist,
        on_delete=models.CASCADE,
        related_name='entries',
        db_column='tierlist_uuid',
    )

    tier = models.ForeignKey(
        Tier,
        on_delete=models.SET_NULL,
        related_name='entries',
        null=True,
        blank=True,
        db_column='tier_id',
    )

    file_key = models.CharField(
        max_length=_FILE_KEY_MAX_LENGTH,
        unique=True,
        help_text='Blob key without prefix: <uuid>.<ext>',
    )

    class Meta:
        """Model metadata."""

        db_table = 'entries'
        verbose_name = 'Entry'  # type: ignore[mutable-override]
        verbose_name_plural = 'Entries'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['id']

        indexes: ClassVar[list[models.Index]] = [
            # Optimize unassigned entries lookup
            models.Index(
                fields=['tierlist', 'tier'],
                name='entries_tierlist_tier_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.tierlist_id}:{self.file_key}'

    def to_dict(self) -> dict[str, object]:
        """Serialize to the public entry shape.

        Returns:
            Dictionary with id, tierlist_uuid, tier_id and file_key.
        """
        return {
            'id': self.id,
            'tierlist_uuid': self.tierlist_id,
            'tier_id': self.tier_id,
            'file_key': self.file_key,
        }
