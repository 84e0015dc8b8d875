from django.contrib import admin

from organizations.models import Organization, OrganizationMember


class OrganizationMemberInline(admin.TabularInline):
    model = OrganizationMember
    extra = 0
    raw_id_fields = ("user",)


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "platform_fee_percentage", "is_deleted", "created_at")
    list_filter = ("is_deleted",)
    search_fields = ("name", "slug", "email")
    inlines = [OrganizationMemberInline]

    def get_queryset(self, request):
        return Organization.all_objects.all()
