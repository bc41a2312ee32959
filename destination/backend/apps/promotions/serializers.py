from rest_framework import serializers
from .models import Promotion


class PromotionSerializer(serializers.ModelSerializer):
    is_current = serializers.BooleanField(read_only=True)

    class Meta:
        model = Promotion
        fields = ['id', 'title', 'description', 'business_type', 'business_id',
                  'discount_percent', 'discount_amount', 'valid_from', 'valid_until', 'code',
                  'min_amount', 'max_discount', 'usage_limit', 'used_count', 'is_active',
                  'is_current', 'terms', 'images', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['id', 'used_count', 'created_by', 'created_at', 'updated_at']
        extra_kwargs = {'code': {'required': False, 'validators': []}}

    def validate_code(self, value):
        value = value.upper().strip()
        qs = Promotion.objects.filter(code=value)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if value and qs.exists():
            raise serializers.ValidationError('Promotion code already exists.')
        return value

    def validate_discount_percent(self, value):
        if value is not None and not 0 <= value <= 100:
            raise serializers.ValidationError('Discount percent must be between 0 and 100.')
        return value

    def validate(self, data):
        def current(name):
            if name in data:
                return data[name]
            return getattr(self.instance, name, None) if self.instance else None

        start, end = current('valid_from'), current('valid_until')
        if start and end and end <= start:
            raise serializers.ValidationError({'valid_until': 'Valid until must be after valid from.'})
        if not current('discount_percent') and not current('discount_amount'):
            raise serializers.ValidationError('Either discount_percent or discount_amount is required.')
        return data
