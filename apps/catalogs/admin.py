# ==========================================
# apps/catalogs/admin.py
# ==========================================

from django.contrib import admin
from .models import General, Concept, Subconcept, Description, Provider


class CatalogAdmin(admin.ModelAdmin):
    """Common admin behaviour: active filter and bulk (de)activation."""

    list_filter = ['is_active']
    search_fields = ['name', 'description']
    readonly_fields = ['id', 'created_at', 'updated_at']
    actions = ['activate_items', 'deactivate_items']

    @admin.action(description='Activate selected entries')
    def activate_items(self, request, queryset):
        count = queryset.update(is_active=True)
        self.message_user(request, f'Activated {count} entr(ies).')

    @admin.action(description='Deactivate selected entries')
    def deactivate_items(self, request, queryset):
        count = queryset.update(is_active=False)
        self.message_user(request, f'Deactivated {count} entr(ies).')


class ConceptInline(admin.TabularInline):
    model = Concept
    extra = 0
    fields = ['name', 'type', 'is_active']
    show_change_link = True


@admin.register(General)
class GeneralAdmin(CatalogAdmin):
    list_display = ['name', 'type', 'is_active', 'created_at']
    list_filter = ['type', 'is_active']
    inlines = [ConceptInline]


@admin.register(Concept)
class ConceptAdmin(CatalogAdmin):
    list_display = ['name', 'general', 'type', 'is_active']
    list_filter = ['type', 'is_active', 'general']
    list_select_related = ['general']


@admin.register(Subconcept)
class SubconceptAdmin(CatalogAdmin):
    list_display = ['name', 'concept', 'is_active']
    list_filter = ['is_active', 'concept__general']
    list_select_related = ['concept']


@admin.register(Description)
class DescriptionAdmin(CatalogAdmin):
    list_display = ['name', 'concept', 'is_active']
    list_filter = ['is_active', 'concept__general']
    list_select_related = ['concept']


@admin.register(Provider)
class ProviderAdmin(CatalogAdmin):
    list_display = ['name', 'rfc', 'contact_name', 'email', 'phone', 'is_active']
    search_fields = ['name', 'rfc', 'contact_name', 'email', 'address']
