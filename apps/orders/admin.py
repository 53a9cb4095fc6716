from django.contrib import admin
from unfold.admin import ModelAdmin, TabularInline

from apps.orders.models import Order, OrderItem, RestaurantPayment


class OrderItemInline(TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("dish", "restaurant", "name", "price", "quantity")
    can_delete = False

    def has_add_permission(self, request, obj):
        return False


class RestaurantPaymentInline(TabularInline):
    model = RestaurantPayment
    extra = 0
    readonly_fields = ("restaurant", "amount", "order_fee", "status", "stripe_payment_intent_id", "paid_at")
    can_delete = False

    def has_add_permission(self, request, obj):
        return False


@admin.register(Order)
class OrderAdmin(ModelAdmin):
    list_display = ("id", "customer", "status", "total", "delivery_type", "is_guest_order", "created_at")
    list_filter = ("status", "delivery_type", "is_guest_order", "created_at")
    search_fields = ("id", "user__email", "user__name", "guest_email", "guest_name")
    readonly_fields = ("total", "platform_fee", "paid_at", "created_at", "updated_at")
    inlines = [OrderItemInline, RestaurantPaymentInline]
    autocomplete_fields = ["user"]

    def customer(self, obj):
        return obj.customer_email

    customer.short_description = "Customer"

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(OrderItem)
class OrderItemAdmin(ModelAdmin):
    list_display = ("order_id", "name", "restaurant", "quantity", "price")
    list_filter = ("order__status", "restaurant")
    search_fields = ("order__id", "name", "restaurant__name")
    readonly_fields = ("order", "dish", "restaurant", "name", "price", "quantity", "created_at", "updated_at")
