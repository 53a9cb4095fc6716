from django.contrib import admin
from unfold.admin import ModelAdmin, TabularInline

from apps.restaurants.models import Dish, Restaurant, RestaurantOwner


class DishInline(TabularInline):
    model = Dish
    extra = 0
    exclude = ("deleted_at",)


class RestaurantInline(TabularInline):
    model = Restaurant
    extra = 0
    fields = ("name", "cuisine", "stripe_account_id", "is_active")
    readonly_fields = ("stripe_account_id",)
    show_change_link = True


@admin.register(RestaurantOwner)
class RestaurantOwnerAdmin(ModelAdmin):
    list_display = ("user", "is_subscribed", "stripe_customer_id", "stripe_account_id", "created_at")
    list_filter = ("is_subscribed",)
    search_fields = ("user__email", "user__name", "stripe_customer_id", "stripe_account_id")
    readonly_fields = ("created_at", "updated_at")
    autocomplete_fields = ["user"]
    inlines = [RestaurantInline]


@admin.register(Restaurant)
class RestaurantAdmin(ModelAdmin):
    list_display = ("name", "owner", "cuisine", "onboarded", "is_active")
    list_filter = ("cuisine", "is_active")
    search_fields = ("name", "owner__user__email")
    exclude = ("deleted_at",)
    autocomplete_fields = ["owner"]
    inlines = [DishInline]

    def onboarded(self, obj):
        return not obj.needs_onboarding

    onboarded.boolean = True
    onboarded.short_description = "Connected account"


@admin.register(Dish)
class DishAdmin(ModelAdmin):
    list_display = ("name", "restaurant", "price", "is_available")
    list_filter = ("is_available", "restaurant")
    search_fields = ("name", "restaurant__name")
    exclude = ("deleted_at",)
    autocomplete_fields = ["restaurant"]
