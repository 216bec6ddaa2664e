from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import Client, User


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['company_name', 'short_code', 'next_invoice_number', 'billing_email', 'is_active']
    list_filter = ['is_active']
    search_fields = ['company_name', 'short_code']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ['username', 'email', 'role', 'is_active']
    list_filter = ['role', 'is_active']
    filter_horizontal = ['clients']
    fieldsets = DjangoUserAdmin.fieldsets + (
        ('Dashboard access', {'fields': ('role', 'clients')}),
    )
