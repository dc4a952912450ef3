"""Django admin configuration for tierlists app."""

from django.contrib import admin
from django.db.models import Count, QuerySet
from django.http import HttpRequest

from server.apps.tierlists.models import Entry, Tier, Tierlist


class TierInline(admin.TabularInline):  # type: ignore[type-arg]
    """Inline editor for a tierlist's tiers."""

    model = Tier
    extra = 0
    fields = ['name', 'order']
    ordering = ['order', 'id']


@admin.register(Tierlist)
class TierlistAdmin(admin.ModelAdmin[Tierlist]):
    """Admin interface for Tierlist model."""

    list_display = [
        'name',
        'uuid',
        'entry_count',
    ]

    search_fields = [
        'name',
        'uuid',
    ]

    readonly_fields = ['uuid']

    inlines = [TierInline]

    def entry_count(self, obj: Tierlist) -> int:
        """Count of entries in the tierlist.

        Args:
            obj: Tierlist instance.

        Returns:
            Number of entries, assigned or not.
        """
        return obj.entry_count  # type: ignore[attr-defined]
    entry_count.short_description = 'Entries'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Tierlist]:
        """Annotate queryset with entry counts.

        Args:
            request: HTTP request.

        Returns:
            Annotated QuerySet.
        """
        return super().get_queryset(request).annotate(
            entry_count=Count('entries'),
        )


@admin.register(Tier)
class TierAdmin(admin.ModelAdmin[Tier]):
    """Admin interface for Tier model."""

    list_display = [
        'name',
        'tierlist',
        'order',
    ]

    list_filter = [
        'name',
    ]

    search_fields = [
        'name',
        'tierlist__name',
    ]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Tier]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('tierlist')


@admin.register(Entry)
class EntryAdmin(admin.ModelAdmin[Entry]):
    """Admin interface for Entry model."""

    list_display = [
        'file_key',
        'tierlist',
        'tier_display',
    ]

    search_fields = [
        'file_key',
        'tierlist__name',
    ]

    # Blob key is fixed once the blob is written
    readonly_fields = [
        'file_key',
        'tierlist',
    ]

    def tier_display(self, obj: Entry) -> str:
        """Display tier name or unassigned marker.

        Args:
            obj: Entry instance.

        Returns:
            Tier name, or '-' when unassigned.
        """
        if obj.tier is None:
            return '-'
        return obj.tier.name
    tier_display.short_description = 'Tier'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Entry]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related(
            'tierlist',
            'tier',
        )
