from rest_framework import serializers
from django.db import transaction
from .models import Booking, Favorite
from apps.listings.registry import find_listing
from apps.promotions.models import Promotion, PromotionError


class BookingSerializer(serializers.ModelSerializer):
    nights = serializers.IntegerField(read_only=True)
    promo_code = serializers.CharField(required=False, allow_blank=True, max_length=30)
    guest_name = serializers.CharField(required=False, max_length=150)
    guest_email = serializers.EmailField(required=False)
    guest_phone = serializers.CharField(required=False, max_length=20)

    class Meta:
        model = Booking
        fields = ["id", "customer", "item_type", "item_id", "item_name", "item_location",
                  "guest_name", "guest_email", "guest_phone", "booking_date", "check_in_date",
                  "check_out_date", "event_date", "nights", "number_of_guests", "number_of_rooms",
                  "total_amount", "discount_amount", "promo_code", "currency", "payment_status",
                  "booking_status", "special_requests", "notes", "cancellation_reason",
                  "cancellation_date", "refund_amount", "transaction_id", "confirmation_number",
                  "confirmation_sent", "created_at", "updated_at"]
        read_only_fields = ["id", "customer", "item_name", "item_location", "booking_date",
                            "discount_amount", "currency", "payment_status", "booking_status",
                            "cancellation_reason", "cancellation_date", "refund_amount",
                            "transaction_id", "confirmation_number", "confirmation_sent",
                            "created_at", "updated_at"]

    def validate_number_of_guests(self, value):
        if value < 1:
            raise serializers.ValidationError("At least one guest is required.")
        return value

    def validate_total_amount(self, value):
        if value < 0:
            raise serializers.ValidationError("Total amount cannot be negative.")
        return value

    def validate(self, data):
        item_type = data.get("item_type")
        user = self.context["request"].user

        listing = find_listing(item_type, data.get("item_id"), active_only=True)
        if listing is None:
            raise serializers.ValidationError({"item_id": "Item not found or not available for booking."})
        data["listing"] = listing

        if item_type == "hotel" and not data.get("check_in_date"):
            raise serializers.ValidationError({"check_in_date": "Check-in date is required for hotel bookings."})
        if item_type in Booking.DATED_TYPES and not data.get("event_date"):
            raise serializers.ValidationError({"event_date": "Event date is required for event bookings."})
        check_in, check_out = data.get("check_in_date"), data.get("check_out_date")
        if check_in and check_out and check_out <= check_in:
            raise serializers.ValidationError({"check_out_date": "Check-out must be after check-in."})

        data.setdefault("guest_name", user.display_name)
        data.setdefault("guest_email", user.email)
        if not data.get("guest_phone"):
            if not user.phone:
                raise serializers.ValidationError({"guest_phone": "This field is required."})
            data["guest_phone"] = user.phone

        code = data.get("promo_code", "").strip()
        if code:
            try:
                promo, discount = Promotion.validate_code(code, data["total_amount"], item_type)
            except PromotionError as e:
                raise serializers.ValidationError({"promo_code": e.message})
            data["promotion"] = promo
            data["promo_code"] = promo.code
            data["discount_amount"] = discount
        return data

    @transaction.atomic
    def create(self, validated_data):
        listing = validated_data.pop("listing")
        promo = validated_data.pop("promotion", None)
        if promo is not None:
            if not promo.redeem():
                raise serializers.ValidationError({"promo_code": "Promotion code usage limit reached"})
            validated_data["total_amount"] = validated_data["total_amount"] - validated_data["discount_amount"]
        validated_data["customer"] = self.context["request"].user
        validated_data["item_name"] = listing.name
        validated_data["item_location"] = listing.location_label
        return super().create(validated_data)


class BookingUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Booking
        fields = ["guest_name", "guest_email", "guest_phone", "check_in_date", "check_out_date",
                  "event_date", "number_of_guests", "number_of_rooms", "special_requests", "notes"]

    def validate(self, data):
        check_in = data.get("check_in_date", self.instance.check_in_date)
        check_out = data.get("check_out_date", self.instance.check_out_date)
        if check_in and check_out and check_out <= check_in:
            raise serializers.ValidationError({"check_out_date": "Check-out must be after check-in."})
        if data.get("number_of_guests") is not None and data["number_of_guests"] < 1:
            raise serializers.ValidationError({"number_of_guests": "At least one guest is required."})
        return data


class FavoriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Favorite
        fields = ["id", "item_type", "item_id", "item_name", "notes", "added_at"]
        read_only_fields = ["id", "item_name", "added_at"]
